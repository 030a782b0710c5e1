""" Dataclasses that describe packer fields, traits, and association bindings """

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

from .annotations import FieldBlockT, ArbitraryBlockT, SetupHookT
from .defs import FieldType

if TYPE_CHECKING:
    from .packer import Packer


@dataclass(frozen=True)
class Field:
    """ A field of a packer. Base class. """
    field_type: FieldType

    # Output key. `None` for ARBITRARY fields
    name: Optional[str]


@dataclass(frozen=True)
class MethodField(Field):
    """ output[name] = entity.name """

    @classmethod
    def make(cls, name: str) -> MethodField:
        return cls(field_type=FieldType.METHOD, name=name)


@dataclass(frozen=True)
class BlockField(Field):
    """ output[name] = compute(entity) """
    compute: FieldBlockT

    @classmethod
    def make(cls, name: str, compute: FieldBlockT) -> BlockField:
        return cls(field_type=FieldType.BLOCK, name=name, compute=compute)


@dataclass(frozen=True)
class AssociationField(Field):
    """ output[name] = pack(entity.name) using the packer bound to `name` """
    packer: Packer
    traits: Tuple[str, ...]

    @classmethod
    def make(cls, name: str, packer: Packer, traits: Tuple[str, ...]) -> AssociationField:
        return cls(field_type=FieldType.ASSOCIATION, name=name, packer=packer, traits=traits)


@dataclass(frozen=True)
class ArbitraryField(Field):
    """ mutate(entity, output): modify the output in any way """
    mutate: ArbitraryBlockT

    @classmethod
    def make(cls, mutate: ArbitraryBlockT) -> ArbitraryField:
        return cls(field_type=FieldType.ARBITRARY, name=None, mutate=mutate)


@dataclass(frozen=True)
class AssociationBinding:
    """ The packer (with traits) to use for a relationship """
    packer: Packer
    traits: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Trait:
    """ A named set of additional fields: setup(instance) adds them to a packer instance """
    name: str
    setup: SetupHookT
