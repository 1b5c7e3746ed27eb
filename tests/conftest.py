"""
Pytest configuration and shared fixtures.
"""

import threading
from typing import Any, Dict, List, Optional

import pytest

from personenricher.database import get_session_factory, init_database
from personenricher.errors import ResolverError
from personenricher.logger import StructuredLogger, get_logger, reset_logger
from personenricher.person import Person
from personenricher.repository import SqlAlchemyRepository


class FakeEnricher:
    """
    In-memory stand-in for the demografix Enricher.

    Values are returned per attribute; an Exception instance in place of a
    value is raised instead. Calls are recorded with the thread they ran on.
    """

    def __init__(
        self,
        age: Any = 36,
        gender: Any = "female",
        nationality: Any = "GB",
        barrier: Optional[threading.Barrier] = None,
    ):
        self.values = {"age": age, "gender": gender, "nationality": nationality}
        self.barrier = barrier
        self.calls: List[Dict[str, str]] = []
        self._lock = threading.Lock()

    def _lookup(self, attribute: str, name: str):
        with self._lock:
            self.calls.append({"attribute": attribute, "name": name, "thread": threading.current_thread().name})
        if self.barrier is not None:
            self.barrier.wait()
        value = self.values[attribute]
        if isinstance(value, Exception):
            raise value
        return value

    def get_age_by_name(self, name: str) -> int:
        return self._lookup("age", name)

    def get_gender_by_name(self, name: str) -> str:
        return self._lookup("gender", name)

    def get_nationality_by_name(self, name: str) -> str:
        return self._lookup("nationality", name)

    @property
    def called_attributes(self) -> List[str]:
        return sorted(call["attribute"] for call in self.calls)


@pytest.fixture(autouse=True)
def quiet_logger():
    """Install a global logger with no handlers so nothing is written to logs/."""
    reset_logger()
    logger = get_logger(name="personenricher-test", level="DEBUG", enable_file=False, enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def logger() -> StructuredLogger:
    return get_logger()


@pytest.fixture
def enricher_factory():
    return FakeEnricher


@pytest.fixture
def fake_enricher() -> FakeEnricher:
    return FakeEnricher()


@pytest.fixture
def failing_enricher() -> FakeEnricher:
    """Enricher whose gender and nationality lookups fail."""
    return FakeEnricher(
        gender=ResolverError("gender", "couldn't determine gender", undetermined=True),
        nationality=ResolverError("nationality", "lookup request timed out"),
    )


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'persons.db'}"


@pytest.fixture
def engine(database_url):
    engine = init_database(database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def repository(session_factory, logger):
    """Repository over one open transaction; closed after the test."""
    session = session_factory()
    yield SqlAlchemyRepository(session, logger)
    session.close()


@pytest.fixture
def ada() -> Person:
    return Person(name="Ada", surname="Lovelace")


@pytest.fixture
def stored_persons(session_factory, logger) -> List[Person]:
    """Commit four persons and return them with their ids."""
    persons = [
        Person(name="Ada", surname="Lovelace", age=36, gender="female", nationality="GB"),
        Person(name="Byron", surname="Lovelace", age=36, gender="male", nationality="GB"),
        Person(name="Charles", surname="Babbage", age=79, gender="male", nationality="GB"),
        Person(name="Grace", surname="Hopper", patronymic="Brewster", age=85, gender="female", nationality="US"),
    ]
    session = session_factory()
    repo = SqlAlchemyRepository(session, logger)
    for person in persons:
        person.save(repo)
    repo.commit()
    session.close()
    return persons
