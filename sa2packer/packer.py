""" Packer: a declarative description of how to pack a model into a dict

Declare a packer once, at import time:

    UserPacker = Packer(User)
    UserPacker.field('id')
    UserPacker.field('name')
    UserPacker.field('posts', PostPacker, 'with_comments')

    @UserPacker.trait('with_email')
    def with_email(p: PackerInstance):
        p.field('email')

Then use it as many times as you like:

    UserPacker.pack(ssn.query(User))  # -> [{'id': 1, 'name': 'Paul', 'posts': [...]}]
    UserPacker.pack(user, 'with_email', current_user=me)  # -> {'id': 1, ...}

Every pack() call creates a fresh PackerInstance, so traits and context never leak between calls.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from . import pack as packing
from .annotations import PackedT, SAModelT, SetupHookT
from .declarations import PackerDeclarations
from .eager_hash import deep_dup
from .exc import ModelAlreadyDeclaredError, DuplicateTraitError, MissingTraitBlockError
from .fields import Trait
from .host import Host, sqlalchemy_host
from .instance import PackerInstance


class Packer(PackerDeclarations):
    """ A packer definition: fields, traits, associations

    Args:
        model: the model to pack. Can be declared later with set_model()
        host: the ORM interface. SqlAlchemy by default
        name: the name to use in error messages
    """

    #: Traits: { name => Trait }
    class_traits: Dict[str, Trait]

    #: Functions to call with every new packer instance, before its traits are applied
    context_hooks: List[SetupHookT]

    def __init__(self, model: Optional[SAModelT] = None, *, host: Host = None, name: str = None):
        self._model = None
        self.name = name
        self.host = host or sqlalchemy_host
        self.fields = []
        self.association_packers = {}
        self.class_traits = {}
        self.eager_hash = None
        self.precomputations = []
        self.context_hooks = []

        if model is not None:
            self.set_model(model)

    def set_model(self, Model: SAModelT):
        """ Declare the model this packer packs. Only once. """
        if self._model is not None:
            raise ModelAlreadyDeclaredError(f'{self!r} already packs {self._model.__name__}')
        self._model = Model

    def trait(self, name: str, setup: SetupHookT = None):
        """ Declare a trait: a set of fields that is only added when asked for

        `setup(instance)` is called on a PackerInstance; it can declare fields, associations, eager loading,
        and precomputations there.

        Can be used as a decorator:

            @UserPacker.trait('with_posts')
            def with_posts(p):
                p.field('posts', PostPacker)

        Without `setup`, nothing is declared until the decorator is applied:
        DuplicateTraitError and MissingTraitBlockError are raised then.
        """
        if setup is None:
            def decorator(setup: SetupHookT) -> SetupHookT:
                self.trait(name, setup)
                return setup
            return decorator

        if name in self.class_traits:
            raise DuplicateTraitError(f'Trait {name!r} is already declared on {self!r}')

        if not callable(setup):
            raise MissingTraitBlockError(f'Trait {name!r} of {self!r} needs a setup function; got {setup!r}')

        self.class_traits[name] = Trait(name, setup)
        return setup

    def with_context(self, hook: SetupHookT) -> SetupHookT:
        """ Declare a function(instance) to call with every new packer instance, before traits are applied

        Use it to declare fields that depend on `instance.context`. Can be used as a decorator.
        """
        self.context_hooks.append(hook)
        return hook

    @property
    def traits(self) -> Iterable[str]:
        """ Names of all declared traits """
        return tuple(self.class_traits)

    def extend(self, *, name: str = None) -> Packer:
        """ Create a new packer with a copy of everything this one has declared

        Declarations made on the new packer do not affect this one.
        """
        packer = Packer(host=self.host, name=name)
        packer._model = self._model
        packer.fields = list(self.fields)
        packer.association_packers = dict(self.association_packers)
        packer.class_traits = dict(self.class_traits)
        packer.eager_hash = deep_dup(self.eager_hash)
        packer.precomputations = list(self.precomputations)
        packer.context_hooks = list(self.context_hooks)
        return packer

    # Packing

    def instance(self, *traits: str, **context) -> PackerInstance:
        """ Create a packer instance with the given traits and context """
        return PackerInstance(self, traits, context)

    def pack(self, data: Any, *traits: str, **context) -> Any:
        """ Pack a query, a list of entities, a single entity, or `None`

        Returns:
            a list of dicts for a query or a list; a dict for a single entity; `None` for `None`
        """
        return self.instance(*traits, **context).pack(data)

    def pack_model(self, entity: Any, *traits: str, **context) -> Optional[PackedT]:
        """ Pack a single entity, or `None` """
        return packing.pack_entity(self.instance(*traits, **context), entity)

    def pack_models(self, entities: Sequence[Any], *traits: str, **context) -> List[PackedT]:
        """ Pack a list of entities """
        return packing.pack_list(self.instance(*traits, **context), entities)

    def pack_dataset(self, query: Any, *traits: str, **context) -> List[PackedT]:
        """ Execute a query and pack the results """
        return packing.pack_query(self.instance(*traits, **context), query)

    def __repr__(self):
        if self.name:
            return self.name
        model_name = self._model.__name__ if self._model is not None else None
        return f'{type(self).__name__}({model_name})'
