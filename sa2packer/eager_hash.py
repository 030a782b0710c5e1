""" Eager hashes: a description of which relationships to load, and how

An eager hash is a dict that maps relationship names to their nested eager hashes:

    {'posts': {'comments': None, 'likes': None}, 'likes': None}

`None` means "load the relationship, nothing nested".

A relationship may also be filtered: in this case, its value is an EagerProc() wrapper
that keeps a callable that modifies the statement that loads the relationship:

    {'posts': EagerProc(lambda stmt: stmt.where(Post.published), {'comments': None})}

Users never have to write EagerProc() themselves: eager() accepts a callable as a key:

    packer.eager('likes', {'posts': {published: 'comments'}})

An eager hash is "normalized" when:

* Keys are relationship names
* Values are either `None`, a nested normalized eager hash, or an EagerProc()
* An EagerProc() never contains another EagerProc() directly: only under some relationship name

Eager hashes are merged as packers are combined. A merge never modifies its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .annotations import EagerArgsT, EagerHashT, EagerProcT
from .exc import EagerArgumentError, MixedProcHashError, MultipleProcKeysError, NestedEagerProcsError


@dataclass(frozen=True)
class EagerProc:
    """ A filtered relationship: `proc` is applied to the statement that loads it """
    proc: EagerProcT
    nested: Optional[EagerHashT] = None


class ComposedProc:
    """ Several eager procs applied one after another, left to right

    Example:
        ComposedProc(only_even, only_positive)(numbers) == only_positive(only_even(numbers))
    """
    __slots__ = ('procs',)

    def __init__(self, *procs: EagerProcT):
        # Flatten: a composition of compositions is a single composition
        self.procs = tuple(
            p
            for proc in procs
            for p in (proc.procs if isinstance(proc, ComposedProc) else (proc,))
        )

    def __call__(self, statement: Any) -> Any:
        for proc in self.procs:
            statement = proc(statement)
        return statement

    def __repr__(self):
        return f'{type(self).__name__}{self.procs!r}'


def is_eager_proc(value: Any) -> bool:
    """ Is the value a filtered relationship? """
    return isinstance(value, EagerProc)


def is_proc_dict(value: Any) -> bool:
    """ Is the value a raw proc dict, like {<callable>: 'nested'}? """
    return isinstance(value, Mapping) and len(value) == 1 and _is_proc(next(iter(value)))


def normalize_eager_args(*associations: EagerArgsT) -> EagerHashT:
    """ Convert eager() arguments into a normalized eager hash

    Accepts:
        normalize_eager_args('assoc')
        normalize_eager_args(['assoc1', 'assoc2'])
        normalize_eager_args({'assoc': 'nested_assoc'})
        normalize_eager_args('assoc1', {'assoc2': {<callable>: ['nested1', 'nested2']}})
        normalize_eager_args({'assoc': <callable>})  # same as {'assoc': {<callable>: None}}

    Note that the top level of the result is never an EagerProc(): filters only make sense under a relationship name.

    Raises:
        MixedProcHashError: names and a callable used as keys of the same dict
        MultipleProcKeysError: more than one callable used as a key of the same dict
        NestedEagerProcsError: a callable points to another callable
        EagerArgumentError: something weird given
    """
    normalized = {}

    for association in _flatten(associations):
        if isinstance(association, str):
            normalized[association] = None
        elif isinstance(association, Mapping):
            if _check_proc_keys(association):
                raise EagerArgumentError(
                    f'A filter has to be nested under an association name: {association!r}'
                )

            for key, value in association.items():
                if not isinstance(key, str):
                    raise EagerArgumentError(f'Association names must be strings; got {key!r}')
                normalized[key] = _normalize_value(value)
        else:
            raise EagerArgumentError(
                f'Associations must be given as a string, a list, or a dict; got {association!r}'
            )

    return normalized


def _normalize_value(value: Any) -> Optional[EagerHashT]:
    """ Normalize the value found under an association name """
    # Nothing nested
    if value is None:
        return None
    # Already normalized
    elif is_eager_proc(value):
        return deep_dup(value)
    # {'assoc': <callable>}
    elif _is_proc(value):
        return EagerProc(value, None)
    # {'assoc': {<callable>: nested}}
    elif isinstance(value, Mapping) and _check_proc_keys(value):
        (proc, nested), = value.items()
        return EagerProc(proc, None if nested is None else normalize_eager_args(nested))
    # {'assoc': nested}
    else:
        return normalize_eager_args(value)


def _check_proc_keys(mapping: Mapping) -> bool:
    """ Validate the callable keys of a dict; tell whether it has one """
    proc_keys = [key for key in mapping if _is_proc(key)]
    if not proc_keys:
        return False

    if len(proc_keys) > 1:
        raise MultipleProcKeysError(f'Eager hash has multiple filter keys: {mapping!r}')

    if len(proc_keys) != len(mapping):
        raise MixedProcHashError(f'Eager hash has both association names and a filter as keys: {mapping!r}')

    value = mapping[proc_keys[0]]
    if _is_proc(value) or is_proc_dict(value) or is_eager_proc(value):
        raise NestedEagerProcsError(f'Eager hash has nested filters: {mapping!r}')

    return True


def merge(hash1: Optional[EagerHashT], hash2: Optional[EagerHashT]) -> Optional[EagerHashT]:
    """ Merge two eager hashes into a new one. Neither of them is modified. """
    if hash1 is None:
        return deep_dup(hash2)
    return merge_into(deep_dup(hash1), hash2)


def merge_into(hash1: Optional[EagerHashT], hash2: Optional[EagerHashT]) -> Optional[EagerHashT]:
    """ Merge `hash2` into `hash1`, modifying `hash1` but not `hash2`

    Because `hash1` may be `None`, always use the return value.

    When both sides have a filter for the same relationship, they're composed:
    `hash1`'s filter is applied first, `hash2`'s is applied to its result.
    """
    if hash2 is None:
        return hash1
    if hash1 is None:
        return deep_dup(hash2)

    for key, value2 in hash2.items():
        if key not in hash1:
            hash1[key] = deep_dup(value2)
            continue

        value1 = hash1[key]
        proc1, proc2 = is_eager_proc(value1), is_eager_proc(value2)

        if not proc1 and not proc2:
            hash1[key] = merge_into(value1, value2)
        elif proc1 and not proc2:
            # merge into the hash the filter points to
            hash1[key] = EagerProc(value1.proc, merge_into(value1.nested, value2))
        elif not proc1 and proc2:
            # same, flipped. Mind the order: `value2` must not be modified
            hash1[key] = EagerProc(value2.proc, merge_into(value1, value2.nested))
        else:
            hash1[key] = EagerProc(
                ComposedProc(value1.proc, value2.proc),
                merge_into(value1.nested, value2.nested),
            )

    return hash1


def deep_dup(value: Any) -> Any:
    """ Make a deep copy of an eager hash. Callables are shared; dicts are not. """
    if value is None:
        return None
    elif is_eager_proc(value):
        return EagerProc(value.proc, deep_dup(value.nested))
    else:
        return {key: deep_dup(nested) for key, nested in value.items()}


def _is_proc(value: Any) -> bool:
    return callable(value) and not isinstance(value, (str, type))


def _flatten(items: Iterable) -> Iterable:
    for item in items:
        if isinstance(item, (list, tuple)):
            yield from _flatten(item)
        else:
            yield item
