""" PackerInstance: a packer with traits and context applied, ready to pack """

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, TYPE_CHECKING

from . import pack as packing
from .declarations import PackerDeclarations
from .eager_hash import deep_dup, merge_into
from .exc import ContextInTraitError, UnknownTraitError

if TYPE_CHECKING:
    from .packer import Packer


class PackerInstance(PackerDeclarations):
    """ A packer, with its traits applied, and a nested instance for every relationship it packs

    Construction goes like this:

    1. Copy all declarations from the Packer
    2. Call with_context() hooks
    3. Apply traits, in the order given
    4. Create a nested PackerInstance for every association; merge its eager hash into ours

    The context is shared, read-only, with all nested instances.
    An instance is used for a single pack() call.
    """

    #: The definition
    packer: Packer

    #: Read-only context given by the caller
    context: Mapping[str, Any]

    #: Place for precompute() hooks to store their results
    scratch: Dict[str, Any]

    #: Nested instances: { relationship name => instance }
    subpackers: Dict[str, PackerInstance]

    #: Whether this instance, or any nested one, has precompute() hooks to run
    has_precomputations: bool

    def __init__(self, packer: Packer, traits: Sequence[str] = (), context: Mapping[str, Any] = None):
        self.packer = packer
        self._model = packer.model
        self.host = packer.host
        self.context = context if isinstance(context, MappingProxyType) else MappingProxyType(dict(context or {}))
        self.scratch = {}

        # Own copies: traits will add to them
        self.fields = list(packer.fields)
        self.association_packers = dict(packer.association_packers)
        self.eager_hash = deep_dup(packer.eager_hash)
        self.precomputations = list(packer.precomputations)

        for hook in packer.context_hooks:
            hook(self)

        for trait_name in traits:
            try:
                trait = packer.class_traits[trait_name]
            except KeyError:
                raise UnknownTraitError(f'Unknown trait for {packer!r}: {trait_name!r}') from None
            trait.setup(self)

        # Nested instances are created once and reused for every entity
        self.subpackers = {}
        for association, binding in self.association_packers.items():
            subpacker = PackerInstance(binding.packer, binding.traits, self.context)
            self.subpackers[association] = subpacker
            self.eager_hash = merge_into(self.eager_hash, {association: subpacker.eager_hash})

        self.has_precomputations = bool(self.precomputations) or any(
            subpacker.has_precomputations
            for subpacker in self.subpackers.values()
        )

    def with_context(self, hook):
        raise ContextInTraitError(
            'with_context() cannot be used inside a trait or a with_context() hook: '
            'use `instance.context` directly'
        )

    def pack(self, data: Any) -> Any:
        """ Pack a query, a list of entities, a single entity, or `None` """
        return packing.pack(self, data)

    def pack_association(self, association: str, value: Any) -> Any:
        """ Pack an entity, a list of entities, or `None` with the packer bound to the relationship

        Use it in fields to pack a subset of related entities:

            p.set_association_packer('posts', PostPacker)
            p.field('published_posts', lambda user: p.pack_association('posts', [
                post for post in user.posts if post.published
            ]))
        """
        return packing.pack_association(self, association, value)

    def __repr__(self):
        return f'{type(self).__name__}({self.packer!r})'
