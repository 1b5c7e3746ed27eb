"""
Persons Repository.

Responsibilities:
- Insert/update/delete/locked-read/filtered-list on the persons table.
- All operations run inside the one transaction owned by the session.

Non-Responsibilities:
- No validation or enrichment.
- No commit/rollback decisions; the caller decides and calls exactly one.

Invariant:
Update and delete must affect exactly one row.
"""

from typing import List, Optional, Tuple

from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from .database import PersonRow
from .errors import IntegrityError, NotFoundError, StorageError
from .logger import StructuredLogger, get_logger
from .person import Person

ATTRIBUTE_COLUMNS = ("name", "surname", "patronymic", "age", "gender", "nationality")

# Filter fields; a field at its zero value puts no constraint on results.
FILTER_FIELDS = ("id", "name", "surname", "age", "gender", "nationality")

OPEN = "open"
COMMITTED = "committed"
ROLLED_BACK = "rolled_back"
# commit or rollback raised; the session discards the transaction on close
FAILED = "failed"


def _to_person(row: PersonRow) -> Person:
    return Person(
        id=row.id,
        name=row.name,
        surname=row.surname,
        patronymic=row.patronymic or "",
        age=row.age or 0,
        gender=row.gender or "",
        nationality=row.nationality or "",
    )


def _attribute_values(person: Person) -> dict:
    return {column: getattr(person, column) for column in ATTRIBUTE_COLUMNS}


class SqlAlchemyRepository:
    """
    Repository bound to one SQLAlchemy session, i.e. one transaction.

    The transaction goes open -> committed | rolled_back exactly once. The
    repository does not guard against calls after that; the owner must not
    make any.
    """

    def __init__(self, session: Session, logger: Optional[StructuredLogger] = None):
        self.session = session
        self.logger = logger or get_logger()
        self.state = OPEN

    def insert_person(self, person: Person) -> int:
        row = PersonRow(**_attribute_values(person))
        try:
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as e:
            self.logger.error("Failed to insert person", error=str(e))
            raise StorageError(f"failed to insert person: {e}") from e
        return row.id

    def update_person(self, person: Person) -> None:
        try:
            rowcount = (
                self.session.query(PersonRow)
                .filter(PersonRow.id == person.id)
                .update(_attribute_values(person), synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error("Failed to update person", id=person.id, error=str(e))
            raise StorageError(f"failed to update person {person.id}: {e}") from e

        if rowcount != 1:
            self.logger.error("Failed to update person", id=person.id, rowcount=rowcount)
            raise IntegrityError("update", rowcount)

    def delete_person(self, person_id: int) -> None:
        try:
            rowcount = (
                self.session.query(PersonRow)
                .filter(PersonRow.id == person_id)
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error("Failed to delete person", id=person_id, error=str(e))
            raise StorageError(f"failed to delete person {person_id}: {e}") from e

        if rowcount != 1:
            self.logger.error("Failed to delete person", id=person_id, rowcount=rowcount)
            raise IntegrityError("delete", rowcount)

    def locked_query(self, person_id: int) -> Query:
        """Query for one persons row with a row lock (FOR UPDATE)."""
        return (
            self.session.query(PersonRow)
            .filter(PersonRow.id == person_id)
            .with_for_update()
        )

    def get_person_with_lock(self, person_id: int) -> Person:
        """SELECT ... FOR UPDATE by id. The lock is held until commit or rollback."""
        try:
            row = self.locked_query(person_id).one()
        except NoResultFound as e:
            self.logger.debug("Person not found for update", id=person_id)
            raise NotFoundError(f"no person row with id {person_id}") from e
        except SQLAlchemyError as e:
            self.logger.error("Failed to select person for update", id=person_id, error=str(e))
            raise StorageError(f"failed to select person {person_id} for update: {e}") from e
        return _to_person(row)

    def get_all_persons(
        self,
        person_filter: Optional[Person] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Person], int]:
        """
        List persons matching every non-empty field of the filter.

        Args:
            person_filter: Exact-match values; 0 / '' fields are ignored (patronymic is never matched)
            limit: Maximum page size; None means no limit
            offset: Number of matching rows to skip

        Returns:
            Tuple of (page ordered by id ascending, total matches ignoring limit/offset)
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        query = self.session.query(PersonRow)
        if person_filter is not None:
            for field in FILTER_FIELDS:
                value = getattr(person_filter, field)
                if value:
                    query = query.filter(getattr(PersonRow, field) == value)

        try:
            total = query.count()

            page = query.order_by(PersonRow.id.asc())
            if limit is not None:
                page = page.limit(limit)
            rows = page.offset(offset).all()
        except SQLAlchemyError as e:
            self.logger.error("Failed to select persons", error=str(e))
            raise StorageError(f"failed to select persons: {e}") from e

        return [_to_person(row) for row in rows], total

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.state = FAILED
            self.logger.error("Failed to commit transaction", error=str(e))
            raise StorageError(f"failed to commit transaction: {e}") from e
        self.state = COMMITTED

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            self.state = FAILED
            self.logger.error("Failed to rollback transaction", error=str(e))
            raise StorageError(f"failed to rollback transaction: {e}") from e
        self.state = ROLLED_BACK
