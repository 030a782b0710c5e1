from __future__ import annotations

from enum import Enum, auto


class FieldType(Enum):
    """ The kind of a packer field

    Every field is exactly one of those.
    """
    # field('name'): get the attribute from the entity
    METHOD = auto()

    # field('name', lambda entity: ...): compute the value
    BLOCK = auto()

    # field('relationship', OtherPacker, *traits): pack related entities with another packer
    ASSOCIATION = auto()

    # field(lambda entity, output: ...): modify the output dict any way you like
    ARBITRARY = auto()
