""" Eager loading for instances that have already been loaded

SqlAlchemy can only eager load relationships while running the query: with options like selectinload().
When you already have a list of instances, there's no public API to load their relationships in bulk.

eager_load() does exactly that: for every relationship in an eager hash, it issues one query that loads
it for all instances at once, and puts the results into the instances as if they were loaded by SqlAlchemy.
Then it goes on recursively.

Filters from the eager hash (see EagerProc) are applied to the loading statement:

    eager_load(User, users, {'posts': EagerProc(lambda stmt: stmt.where(Post.title != None), None)})

Relationships that are already loaded are not loaded again, and their filters are not applied.
"""

import logging
from collections import defaultdict
from typing import Iterable, List, Optional, Any

from sqlalchemy import select, tuple_
from sqlalchemy.orm import Query, RelationshipProperty, aliased, object_session
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.orm.base import instance_state

from .annotations import EagerHashT, EagerProcT, SAModelT, SAInstanceT
from .eager_hash import is_eager_proc
from .exc import DetachedEntityError
from .sa_extract_info import sa_relationship, sa_model_primary_key_names
from .util import is_attribute_loaded, unique

logger = logging.getLogger(__name__)

# How many parent identities to put into a single IN (...) clause
IN_CHUNK_SIZE = 500


def materialize(query: Query, eager_hash: Optional[EagerHashT]) -> List[SAInstanceT]:
    """ Execute a query and eager load everything the eager hash wants """
    entities = query.all()
    if entities and eager_hash:
        eager_load(model_of_query(query), entities, eager_hash)
    return entities


def eager_load(Model: SAModelT, entities: Iterable[SAInstanceT], eager_hash: Optional[EagerHashT]):
    """ Load relationships of already loaded instances, in bulk

    Args:
        Model: the model of `entities`. Relationships are looked up on it.
        entities: the instances to load the relationships for
        eager_hash: normalized eager hash. See eager_hash.normalize_eager_args()
    Raises:
        DetachedEntityError: some instance has to be loaded, but has no Session
    """
    entities = list(entities)
    if not entities or not eager_hash:
        return

    for name, nested in eager_hash.items():
        proc = None
        if is_eager_proc(nested):
            proc, nested = nested.proc, nested.nested

        rel = sa_relationship(Model, name)

        # Only load what's not loaded yet
        unloaded = [entity for entity in entities if not is_attribute_loaded(entity, name)]
        if unloaded:
            load_relationship(Model, rel, unloaded, proc)
        else:
            logger.debug('%s.%s: already loaded for %d instances', Model.__name__, name, len(entities))

        # Go deeper
        if nested:
            related = related_entities(entities, name, rel.uselist)
            eager_load(rel.mapper.class_, related, nested)


def load_relationship(Model: SAModelT, rel: RelationshipProperty, entities: List[SAInstanceT], proc: Optional[EagerProcT]):
    """ Load a relationship for every instance, using one query per IN_CHUNK_SIZE instances

    The loaded value is set as committed, just like SqlAlchemy loaders do it.
    Every instance gets a value: an empty collection or `None` when nothing is found.
    """
    ssn = object_session(entities[0])
    if ssn is None:
        raise DetachedEntityError(
            f'Cannot load {Model.__name__}.{rel.key}: {entities[0]!r} is not bound to a Session'
        )

    identities = []
    for entity in entities:
        identity = instance_state(entity).identity
        if identity is None:
            raise DetachedEntityError(
                f'Cannot load {Model.__name__}.{rel.key}: {entity!r} is not persistent'
            )
        identities.append(identity)

    # The parent is aliased; the target is not.
    # This way, filters and `order_by` that refer to the target model work even for self-referential relationships.
    Parent = aliased(Model)
    primary_key = [getattr(Parent, name) for name in sa_model_primary_key_names(Model)]
    Target = rel.mapper.class_

    # Every identity is queried once: duplicates would otherwise get their related rows twice
    distinct_identities = unique_identities(identities)

    found = defaultdict(list)
    for offset in range(0, len(distinct_identities), IN_CHUNK_SIZE):
        chunk = distinct_identities[offset:offset + IN_CHUNK_SIZE]

        stmt = select(*primary_key, Target).select_from(Parent).join(getattr(Parent, rel.key))
        if len(primary_key) == 1:
            stmt = stmt.where(primary_key[0].in_([identity[0] for identity in chunk]))
        else:
            stmt = stmt.where(tuple_(*primary_key).in_(chunk))

        # Filter first; then order. The filter's ordering, if any, takes precedence
        if proc is not None:
            stmt = proc(stmt)
        stmt = stmt.order_by(*default_ordering(rel))

        logger.debug('%s.%s: loading for %d instances', Model.__name__, rel.key, len(chunk))
        for *identity, related in ssn.execute(stmt):
            found[tuple(identity)].append(related)

    for entity, identity in zip(entities, identities):
        items = found.get(identity, [])
        if rel.uselist:
            value = items
        else:
            value = items[0] if items else None
        set_committed_value(entity, rel.key, value)


def default_ordering(rel: RelationshipProperty) -> list:
    """ Order related rows by relationship(order_by=) or by the primary key """
    if rel.order_by:
        return list(rel.order_by)
    Target = rel.mapper.class_
    return [getattr(Target, name) for name in sa_model_primary_key_names(Target)]


def related_entities(entities: Iterable[SAInstanceT], name: str, uselist: bool) -> List[SAInstanceT]:
    """ Collect related instances: flatten collections, drop `None`s, remove duplicates """
    related = []
    for entity in entities:
        value = getattr(entity, name)
        if value is None:
            continue
        elif uselist:
            related.extend(collection_items(value))
        else:
            related.append(value)
    return unique(related)


def collection_items(value: Any) -> list:
    """ Items of a relationship collection: list, set, or dict (attribute_mapped_collection) """
    if isinstance(value, dict):
        return list(value.values())
    return list(value)


def unique_identities(identities: List[tuple]) -> List[tuple]:
    return list(dict.fromkeys(identities))


def model_of_query(query: Query) -> SAModelT:
    """ Get the model a query selects """
    return query.column_descriptions[0]['entity']
