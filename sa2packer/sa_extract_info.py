""" Extract relationship information from SqlAlchemy models """
from __future__ import annotations

from functools import lru_cache
from typing import Mapping, Tuple

from sqlalchemy.orm import class_mapper, Mapper, RelationshipProperty

from .annotations import SAModelT


@lru_cache(typed=True)  # makes it really, really cheap to inspect models
def sa_model_relationships(Model: SAModelT) -> Mapping[str, RelationshipProperty]:
    """ Get all relationships of a model: { name => RelationshipProperty } """
    mapper: Mapper = class_mapper(Model)
    return {
        rel.key: rel
        for rel in mapper.relationships
    }


def sa_relationship(Model: SAModelT, name: str) -> RelationshipProperty:
    """ Get a relationship by name. Raises KeyError if there's none """
    return sa_model_relationships(Model)[name]


@lru_cache(typed=True)
def uselist_relationships(Model: SAModelT) -> Mapping[str, bool]:
    """ Inspect a model and return a map of {relationship name => uselist} """
    return {
        name: rel.uselist
        for name, rel in sa_model_relationships(Model).items()
    }


@lru_cache(typed=True)
def sa_model_primary_key_names(Model: SAModelT) -> Tuple[str]:
    """ Get the list of primary key attribute names """
    mapper: Mapper = class_mapper(Model)
    return tuple(mapper.get_property_by_column(c).key for c in mapper.primary_key)
