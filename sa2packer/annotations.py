""" Annotations used here and there """

from typing import TypeVar, Union, Callable, Mapping, Optional, Any, Dict, List

from sqlalchemy.orm import DeclarativeMeta

# SqlAlchemy model
SAModelT = TypeVar('SAModelT', bound=DeclarativeMeta)
SAInstanceT = TypeVar('SAInstanceT', bound=object)

# The output of packing a single entity
PackedT = Dict[str, Any]

# A filter applied to the statement that loads a relationship:
# function(statement) -> statement
EagerProcT = Callable[[Any], Any]

# A normalized eager hash:
#   {'assoc': None, 'assoc2': {'nested': None}, 'assoc3': EagerProc(proc, {'nested': None})}
EagerHashT = Dict[str, Optional[Union['EagerHashT', 'EagerProc']]]

# Arguments accepted by eager(): names, lists, dicts; possibly with callables
EagerArgsT = Union[str, list, tuple, Mapping]

# field('name', fn): fn(entity) -> value
FieldBlockT = Callable[[Any], Any]

# field(fn): fn(entity, output) -> None
ArbitraryBlockT = Callable[[Any, PackedT], None]

# precompute(fn): fn(packer instance, entities) -> None
PrecomputeHookT = Callable[[Any, List[Any]], None]

# with_context(fn) and trait(name, fn): fn(packer instance) -> None
SetupHookT = Callable[[Any], None]
