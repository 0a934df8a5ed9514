import os

# Must be set before student_portal is imported: the engine is built at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENV", "dev")

import pytest
from sqlmodel import SQLModel, Session

from student_portal.database import engine, create_db_and_tables


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test empty tables."""
    SQLModel.metadata.drop_all(engine)
    create_db_and_tables()
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def asha():
    return {
        "name": "Asha",
        "studentClass": "5A",
        "age": 10,
        "addresses": [{"flatNo": "12B", "city": "Pune", "state": "MH"}],
    }
