""" Declarations shared by packers and packer instances

A Packer uses them at import time to declare its fields.
A PackerInstance uses them when traits and with_context() hooks add fields on the fly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .annotations import EagerHashT, PrecomputeHookT, SAModelT
from .eager_hash import normalize_eager_args, merge_into
from .fields import Field, MethodField, BlockField, AssociationField, ArbitraryField, AssociationBinding
from .host import Host
from .validation import check_field_arguments, check_association_packer, check_eager_associations


class PackerDeclarations:
    """ Fields, associations, eager loading, and precomputations of a packer """

    #: The ORM interface
    host: Host

    #: Fields, in the order of declaration
    fields: List[Field]

    #: Packers to use for relationships: { relationship name => binding }
    association_packers: Dict[str, AssociationBinding]

    #: Relationships to eager load (own declarations only; nested packers add theirs later)
    eager_hash: Optional[EagerHashT]

    #: Functions to call with the whole list of entities before packing them
    precomputations: List[PrecomputeHookT]

    _model: Optional[SAModelT]

    @property
    def model(self) -> Optional[SAModelT]:
        """ The model this packer packs """
        return self._model

    def field(self, name: Any = None, value: Any = None, *traits: str):
        """ Declare a field

        Four kinds of fields are supported:

            field('id')  # output['id'] = entity.id
            field('name', lambda user: user.name.title())  # output['name'] = function(entity)
            field('posts', PostPacker, 'with_comments')  # output['posts'] = PostPacker.pack(entity.posts)
            field(lambda user, output: output.update(...))  # modify the output any way you like

        Fields are applied in the order of declaration. A later field may overwrite the value of an earlier one.
        """
        block = packer = None
        if _is_block(name):
            name, block, packer = None, name, value
        elif _is_block(value):
            block = value
        else:
            packer = value

        check_field_arguments(self.host, self.model, name, block, packer, traits)

        if block is not None and name is not None:
            field = BlockField.make(name, block)
        elif block is not None:
            field = ArbitraryField.make(block)
        elif packer is not None:
            self.set_association_packer(name, packer, *traits)
            field = AssociationField.make(name, packer, tuple(traits))
        else:
            field = MethodField.make(name)

        self.fields.append(field)

    def set_association_packer(self, association: str, packer: Any, *traits: str):
        """ Declare the packer for a relationship, without adding a field for it

        Use it when the output key has to differ from the relationship name,
        or when only some of the related entities have to be packed. See PackerInstance.pack_association()
        """
        check_association_packer(self.host, self.model, association, packer, traits)
        self.association_packers[association] = AssociationBinding(packer, tuple(traits))

    def eager(self, *associations):
        """ Declare relationships to eager load

        Example:
            eager('likes', {'posts': {published_only: 'comments'}})

        See eager_hash.normalize_eager_args()
        """
        eager_hash = normalize_eager_args(*associations)
        check_eager_associations(self.host, self.model, eager_hash)
        self.eager_hash = merge_into(self.eager_hash, eager_hash)

    def precompute(self, hook: PrecomputeHookT) -> PrecomputeHookT:
        """ Declare a function(packer instance, entities) to call once with all the entities of this packer

        Use it to compute something for all entities at once, and store the result in `instance.scratch`.
        Can be used as a decorator.
        """
        self.precomputations.append(hook)
        return hook


def _is_block(value: Any) -> bool:
    # Classes are callable too, but they can only be a (wrong) packer
    return callable(value) and not isinstance(value, type)
