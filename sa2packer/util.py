from sqlalchemy.orm.base import manager_of_class, instance_state
from sqlalchemy.orm.state import InstanceState


def is_attribute_loaded(instance: object, attribute_name: str) -> bool:
    """ Tell whether an attribute of an instance has a value that can be used without a query """
    state: InstanceState = instance_state(instance)
    return attribute_name in state.dict or attribute_name in state.committed_state


def is_sa_mapped_class(class_: type) -> bool:
    """ Tell whether the object is an class mapped by SqlAlchemy, declarative or not """
    return isinstance(class_, type) and manager_of_class(class_) is not None


def is_sa_instance(obj: object) -> bool:
    """ Tell whether the object is an instance of a mapped class """
    return is_sa_mapped_class(type(obj))


def unique(items):
    """ Remove duplicates, keep the order. Works with unhashable items: compares by identity """
    seen = set()
    ret = []
    for item in items:
        if id(item) not in seen:
            seen.add(id(item))
            ret.append(item)
    return ret
