""" Checks for common errors in packer declarations

All checks run when a field is declared, not when it's used: mistakes are reported at import time.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional, Sequence

import sa2packer
from .annotations import EagerHashT, SAModelT
from .eager_hash import is_eager_proc
from .exc import (
    ModelNotYetDeclaredError,
    FieldArgumentError,
    AssociationDoesNotExistError,
    InvalidAssociationPackerError,
    UnknownTraitError,
)


def check_field_arguments(host: sa2packer.Host,
                          Model: Optional[SAModelT],
                          field_name: Optional[str],
                          block: Optional[Callable],
                          packer: Any,
                          traits: Sequence[str]):
    """ Check the arguments of field()

    Additional checks for the packer and its traits are done by check_association_packer()

    Args:
        host: the ORM interface, to know which attributes are relationships
        Model: the model of the packer
        field_name: the output key, if given
        block: the function that computes the value, if given
        packer: the packer for a relationship, if given
        traits: the traits for `packer`
    """
    if Model is None:
        raise ModelNotYetDeclaredError('The model has to be declared before any fields. Use Packer(Model)')

    if field_name is not None and not isinstance(field_name, str):
        raise FieldArgumentError(
            f'Field name passed to field() must be a string; got {field_name!r}'
        )

    if block is not None:
        # With a block, it's either:
        #   field('foo', lambda entity: ...)
        #   field(lambda entity, output: ...)
        if packer is not None or traits:
            raise FieldArgumentError(
                'When passing a function to field(), either pass the name of the field '
                "(e.g. field('foo', lambda entity: ...)), or nothing at all to perform arbitrary "
                'modifications of the packed dict (e.g. field(lambda entity, output: ...)).'
            )

        if field_name is not None and not accepts_positional_args(block, 1):
            raise FieldArgumentError(
                f'The function used to define {field_name!r} must accept exactly one argument.'
            )

        if field_name is None and not accepts_positional_args(block, 2):
            raise FieldArgumentError(
                'When passing an arbitrary function to field(), it must accept exactly two arguments: '
                'the entity and the partially packed dict.'
            )
    else:
        if field_name is None:
            # field(lambda entity, output: ...) has no name as well, but it's rarely used
            raise FieldArgumentError('Must pass a field name to field().')

        if packer is None and traits:
            raise FieldArgumentError('Traits can only be given to field() together with a Packer.')

        if packer is None and host.is_known_relation(Model, field_name):
            raise InvalidAssociationPackerError(
                f'{field_name} is an association of {Model.__name__}. '
                f'You must also pass a Packer to be used when packing this association.'
            )


def check_association_packer(host: sa2packer.Host,
                             Model: Optional[SAModelT],
                             association: str,
                             packer: Any,
                             traits: Sequence[str]):
    """ Check the arguments of field(association, packer, *traits) and set_association_packer() """
    if Model is None:
        raise ModelNotYetDeclaredError('The model has to be declared before any associations. Use Packer(Model)')

    if not host.is_known_relation(Model, association):
        raise AssociationDoesNotExistError(
            f'The association {association} does not exist on {Model.__name__}.'
        )

    if not isinstance(packer, sa2packer.Packer):
        raise InvalidAssociationPackerError(
            f'You must pass a Packer to use when packing the {association} association. '
            f'{packer!r} is not a Packer.'
        )

    # The packer may pack a more generic model: e.g. a base class of a polymorphic hierarchy
    association_model = host.related_model(Model, association)
    if packer.model is None or not issubclass(association_model, packer.model):
        packer_model_name = packer.model.__name__ if packer.model is not None else None
        raise InvalidAssociationPackerError(
            f'Model for association packer ({packer_model_name}) '
            f"doesn't match model for the {association} association ({association_model.__name__})"
        )

    for trait in traits:
        if trait not in packer.class_traits:
            raise UnknownTraitError(
                f"Trait {trait!r} isn't defined for {packer!r} used to pack {association} association."
            )


def accepts_positional_args(func: Callable, n: int) -> bool:
    """ Can `func` be called with exactly `n` positional arguments?

    Functions without a signature (some builtins) are given the benefit of the doubt.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True

    required = 0
    maximum = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            maximum = None
        elif param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            if maximum is not None:
                maximum += 1
            if param.default is param.empty:
                required += 1
        elif param.kind == param.KEYWORD_ONLY and param.default is param.empty:
            # can't be called positionally
            return False

    return required <= n and (maximum is None or n <= maximum)


def check_eager_associations(host: sa2packer.Host, Model: Optional[SAModelT], eager_hash: EagerHashT):
    """ Check that every relationship named in a normalized eager hash exists, at every level """
    if Model is None:
        raise ModelNotYetDeclaredError('The model has to be declared before eager loading. Use Packer(Model)')

    for association, nested in eager_hash.items():
        if not host.is_known_relation(Model, association):
            raise AssociationDoesNotExistError(
                f'The association {association} does not exist on {Model.__name__}.'
            )

        if is_eager_proc(nested):
            nested = nested.nested
        if nested:
            check_eager_associations(host, host.related_model(Model, association), nested)
