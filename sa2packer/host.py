""" The interface between packers and the ORM

Packers never touch the entities directly: all access goes through a Host.
SAHost implements it for SqlAlchemy; it's used by default.
"""

from __future__ import annotations

import warnings
from typing import Any, List, Optional, Union

from sqlalchemy.orm import Query
from sqlalchemy.orm.base import instance_state

from . import eager_loading
from .annotations import EagerHashT, SAModelT, SAInstanceT
from .sa_extract_info import sa_model_relationships, sa_relationship, uselist_relationships
from .util import is_sa_instance, is_attribute_loaded


class Host:
    """ The ORM interface. Base class. """

    # Telling the input apart

    def is_query(self, value: Any) -> bool:
        """ Is it a lazy query that has to be executed? """
        raise NotImplementedError

    def is_entity_list(self, value: Any) -> bool:
        """ Is it a list of loaded entities? """
        raise NotImplementedError

    def is_entity(self, value: Any) -> bool:
        """ Is it a single entity? """
        raise NotImplementedError

    # Loading

    def materialize(self, query: Any, eager_hash: Optional[EagerHashT]) -> List[SAInstanceT]:
        """ Execute a query, loading everything from `eager_hash` in bulk """
        raise NotImplementedError

    def bulk_load(self, Model: SAModelT, entities: List[SAInstanceT], eager_hash: Optional[EagerHashT]):
        """ Load everything from `eager_hash` for entities that are already loaded

        Must apply filters; must not reload relationships that are already loaded.
        """
        raise NotImplementedError

    # Entities

    def relation(self, entity: SAInstanceT, name: str) -> Union[SAInstanceT, List[SAInstanceT], None]:
        """ Get the related entity, or a list of entities """
        raise NotImplementedError

    def accessor(self, entity: SAInstanceT, name: str) -> Any:
        """ Get an attribute value """
        raise NotImplementedError

    # Models

    def is_known_relation(self, Model: SAModelT, name: str) -> bool:
        """ Does the model have a relationship with this name? """
        raise NotImplementedError

    def related_model(self, Model: SAModelT, name: str) -> SAModelT:
        """ The model a relationship points to """
        raise NotImplementedError

    def returns_collection(self, Model: SAModelT, name: str) -> bool:
        """ Is the relationship a collection? """
        raise NotImplementedError


class SAHost(Host):
    """ SqlAlchemy

    * queries are `sqlalchemy.orm.Query` objects: `ssn.query(User).filter(...)`
    * relationships are loaded in bulk with eager_loading.eager_load()
    """

    def is_query(self, value: Any) -> bool:
        return isinstance(value, Query)

    def is_entity_list(self, value: Any) -> bool:
        return isinstance(value, (list, tuple))

    def is_entity(self, value: Any) -> bool:
        return is_sa_instance(value)

    def materialize(self, query: Query, eager_hash: Optional[EagerHashT]) -> List[SAInstanceT]:
        return eager_loading.materialize(query, eager_hash)

    def bulk_load(self, Model: SAModelT, entities: List[SAInstanceT], eager_hash: Optional[EagerHashT]):
        eager_loading.eager_load(Model, entities, eager_hash)

    def relation(self, entity: SAInstanceT, name: str) -> Union[SAInstanceT, List[SAInstanceT], None]:
        # Persistent instances should have everything loaded by now
        if instance_state(entity).has_identity and not is_attribute_loaded(entity, name):
            warnings.warn(f'Lazy loading {name!r} from {entity}')

        value = getattr(entity, name)
        if value is not None and uselist_relationships(type(entity))[name]:
            return eager_loading.collection_items(value)
        return value

    def accessor(self, entity: SAInstanceT, name: str) -> Any:
        return getattr(entity, name)

    def is_known_relation(self, Model: SAModelT, name: str) -> bool:
        return name in sa_model_relationships(Model)

    def related_model(self, Model: SAModelT, name: str) -> SAModelT:
        return sa_relationship(Model, name).mapper.class_

    def returns_collection(self, Model: SAModelT, name: str) -> bool:
        return uselist_relationships(Model)[name]


# The default host
sqlalchemy_host = SAHost()
