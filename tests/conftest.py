import pytest
from .db import database_session
from .lib import QueryCounter
from .models import Base


@pytest.fixture()
def sqlite_session():
    with database_session(Base) as ssn:
        yield ssn


@pytest.fixture()
def query_counter(sqlite_session) -> QueryCounter:
    """ Count the SELECT queries made through `sqlite_session` """
    with QueryCounter(sqlite_session.get_bind()) as counter:
        yield counter
