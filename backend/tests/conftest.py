import pytest
from fastapi.testclient import TestClient

from app.database import create_db_engine, create_tables
from app.main import create_app
from app.services.memory_store import MemoryStudentStore
from app.services.sql_store import SQLStudentStore


@pytest.fixture
def memory_store():
    return MemoryStudentStore()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'students.db'}"


@pytest.fixture
def sql_store(sqlite_url):
    engine = create_db_engine(sqlite_url)
    create_tables(engine)
    store = SQLStudentStore(engine)
    yield store
    store.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each store behaviour test runs against both backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as c:
        yield c


@pytest.fixture
def memory_client(memory_store):
    with TestClient(create_app(store=memory_store)) as c:
        yield c
