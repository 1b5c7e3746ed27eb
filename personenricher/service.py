"""
Request-scoped person operations.

Each PersonService method is one inbound operation: it owns exactly one
transaction from open to commit, and rolls it back on every failure path
before the error reaches the caller.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session

from .errors import PersonNotFoundError, StorageError
from .logger import StructuredLogger, get_logger
from .person import Enricher, Person, get_all_persons, get_person_with_lock
from .repository import OPEN, SqlAlchemyRepository


@dataclass
class RequestScope:
    """Collaborators for one operation, built once and passed explicitly."""

    enricher: Enricher
    logger: StructuredLogger
    repository: SqlAlchemyRepository
    # Row loaded under lock by update/delete flows
    person: Optional[Person] = None


class PersonService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        enricher: Enricher,
        logger: Optional[StructuredLogger] = None,
    ):
        self.session_factory = session_factory
        self.enricher = enricher
        self.logger = logger or get_logger()

    @contextmanager
    def request_scope(self) -> Iterator[RequestScope]:
        """
        Open one transaction for the duration of the block.

        The block must commit on success. If it raises, the transaction is
        rolled back and the error re-raised; the session is always closed.
        """
        session = self.session_factory()
        repository = SqlAlchemyRepository(session, self.logger)
        scope = RequestScope(enricher=self.enricher, logger=self.logger, repository=repository)
        try:
            yield scope
        except BaseException:
            if repository.state == OPEN:
                try:
                    repository.rollback()
                except StorageError:
                    # Already logged by the repository; the in-flight error wins.
                    pass
            raise
        finally:
            session.close()

    def create_person(self, person: Person) -> Person:
        """Validate, enrich and insert a new person. Returns it with its assigned id."""
        person.validate()
        person.id = 0
        with self.request_scope() as scope:
            person.enrich(scope.enricher, logger=scope.logger)
            scope.logger.info("Creating person", person=person.to_dict())
            person.save(scope.repository)
            scope.repository.commit()
        return person

    def update_person(self, person_id: int, person: Person) -> Person:
        """
        Replace the stored person with the given data, re-enriched.

        The row stays locked from the initial read until commit, so
        concurrent updates or deletes of the same id run one after another.
        """
        person.validate()
        with self.request_scope() as scope:
            scope.person = get_person_with_lock(scope.repository, person_id)
            person.enrich(scope.enricher, logger=scope.logger)
            person.id = scope.person.id
            scope.logger.info("Updating person", person=person.to_dict())
            person.save(scope.repository)
            scope.repository.commit()
        return person

    def delete_person(self, person_id: int) -> Person:
        """Delete a person by id. Returns the row as it was before deletion."""
        with self.request_scope() as scope:
            scope.person = get_person_with_lock(scope.repository, person_id)
            scope.logger.info("Deleting person", person=scope.person.to_dict())
            scope.person.delete(scope.repository)
            scope.repository.commit()
        return scope.person

    def get_person(self, person_id: int) -> Person:
        # id 0 would match every row in the filter
        if person_id <= 0:
            raise PersonNotFoundError(person_id)
        with self.request_scope() as scope:
            persons, _ = get_all_persons(scope.repository, Person(id=person_id), limit=1)
            if not persons:
                raise PersonNotFoundError(person_id)
            scope.repository.commit()
        return persons[0]

    def list_persons(
        self,
        person_filter: Optional[Person] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Person], int]:
        """Return a page of persons matching the filter and the total number of matches."""
        with self.request_scope() as scope:
            persons, total = get_all_persons(scope.repository, person_filter or Person(), limit, offset)
            scope.repository.commit()
        return persons, total
