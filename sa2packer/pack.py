""" Packing: walk the entities and turn them into dicts

Before anything is packed:

1. All relationships from the eager hash are loaded, in bulk
2. All precompute() hooks are called, once per packer instance, with all the entities that instance is going to pack

Then every entity is packed: fields are applied in the order of declaration.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from .annotations import PackedT, SAInstanceT
from .defs import FieldType
from .util import unique

if TYPE_CHECKING:
    from .instance import PackerInstance


def pack(instance: PackerInstance, data: Any) -> Any:
    """ Pack a query, a list of entities, a single entity, or `None`

    Returns:
        a list of dicts for a query or a list; a dict for a single entity; `None` for `None`
    """
    host = instance.host

    if data is None:
        return None
    elif host.is_query(data):
        return pack_query(instance, data)
    elif host.is_entity_list(data):
        return pack_list(instance, data)
    elif host.is_entity(data):
        return pack_entity(instance, data)
    else:
        raise TypeError(f'{instance!r} cannot pack {data!r}')


def pack_query(instance: PackerInstance, query: Any) -> List[PackedT]:
    """ Execute a query, load everything in bulk, pack """
    entities = instance.host.materialize(query, instance.eager_hash)
    return pack_entities(instance, entities)


def pack_list(instance: PackerInstance, entities: Sequence[SAInstanceT]) -> List[PackedT]:
    """ Load everything for already loaded entities, pack """
    entities = list(entities)
    instance.host.bulk_load(instance.model, entities, instance.eager_hash)
    return pack_entities(instance, entities)


def pack_entity(instance: PackerInstance, entity: Optional[SAInstanceT]) -> Optional[PackedT]:
    """ Pack a single entity, or `None` """
    if entity is None:
        return None

    instance.host.bulk_load(instance.model, [entity], instance.eager_hash)
    run_precomputations(instance, [entity])
    return pack_one(instance, entity)


def pack_entities(instance: PackerInstance, entities: List[SAInstanceT]) -> List[PackedT]:
    """ Pack loaded entities: precompute, then pack every one of them """
    run_precomputations(instance, entities)
    return pack_many(instance, entities)


def run_precomputations(instance: PackerInstance, entities: List[SAInstanceT]):
    """ Call precompute() hooks of the instance and all its nested instances

    Every nested instance gets the de-duplicated list of all entities it will pack.
    Every hook is called exactly once: nested instances are only reachable through their parent.
    """
    for association, subpacker in instance.subpackers.items():
        # Don't bother collecting entities if nobody needs them
        if not subpacker.has_precomputations:
            continue

        run_precomputations(subpacker, related_entities(instance, entities, association))

    for hook in instance.precomputations:
        hook(instance, entities)


def related_entities(instance: PackerInstance, entities: List[SAInstanceT], association: str) -> List[SAInstanceT]:
    """ All entities related through an association: flattened, without `None`s and duplicates """
    host = instance.host
    many = host.returns_collection(instance.model, association)

    related = []
    for entity in entities:
        value = host.relation(entity, association)
        if value is None:
            continue
        elif many:
            related.extend(value)
        else:
            related.append(value)
    return unique(related)


def pack_many(instance: PackerInstance, entities: List[SAInstanceT]) -> List[PackedT]:
    return [pack_one(instance, entity) for entity in entities]


def pack_one(instance: PackerInstance, entity: SAInstanceT) -> PackedT:
    """ Pack a single entity into a dict """
    host = instance.host

    ret = {}
    for field in instance.fields:
        field_type = field.field_type

        if field_type is FieldType.METHOD:
            ret[field.name] = host.accessor(entity, field.name)
        elif field_type is FieldType.BLOCK:
            ret[field.name] = field.compute(entity)
        elif field_type is FieldType.ASSOCIATION:
            related = host.relation(entity, field.name)
            ret[field.name] = pack_association(instance, field.name, related)
        elif field_type is FieldType.ARBITRARY:
            field.mutate(entity, ret)
        else:
            raise IMPOSSIBLE(field_type)
    return ret


def pack_association(instance: PackerInstance, association: str, value: Any) -> Any:
    """ Pack related entities with the nested instance bound to `association`

    A list gives a list, in the same order; a single entity gives a dict; `None` gives `None`
    """
    if value is None:
        return None

    subpacker = instance.subpackers[association]
    if instance.host.is_entity_list(value):
        return pack_many(subpacker, value)
    else:
        return pack_one(subpacker, value)


IMPOSSIBLE = AssertionError
