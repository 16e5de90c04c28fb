import pytest

from database import Store
from services import UserService


@pytest.fixture
def store():
    """In-memory store with every migration applied."""
    store = Store("sqlite+pysqlite:///:memory:")
    store.open()
    store.migrate()
    yield store
    store.close()


@pytest.fixture
def session(store):
    session = store.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def user_id(session) -> int:
    return UserService(session).register("asha", "s3cret").id
