"""
Person entity.

A Person is validated, enriched and persisted through collaborators
passed in by the caller (an Enricher and a Repository). Nothing here
commits or rolls back: the transaction belongs to the caller.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .enrichment import resolve_attributes
from .errors import NotFoundError, PersonNotFoundError, ValidationError
from .logger import StructuredLogger


class Enricher(Protocol):
    def get_age_by_name(self, name: str) -> int: ...

    def get_gender_by_name(self, name: str) -> str: ...

    def get_nationality_by_name(self, name: str) -> str: ...


class Repository(Protocol):
    def insert_person(self, person: "Person") -> int: ...

    def update_person(self, person: "Person") -> None: ...

    def delete_person(self, person_id: int) -> None: ...

    def get_person_with_lock(self, person_id: int) -> "Person": ...

    def get_all_persons(
        self, person_filter: "Person", limit: Optional[int] = None, offset: int = 0
    ) -> Tuple[List["Person"], int]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass
class Person:
    """One individual. Zero and empty values mean unknown; id 0 means never saved."""

    name: str = ""
    surname: str = ""
    patronymic: str = ""
    age: int = 0
    gender: str = ""
    nationality: str = ""
    id: int = 0

    def validate(self) -> None:
        """Check required fields, collecting every violation.

        Raises:
            ValidationError: With one message per empty required field
        """
        errors: List[str] = []

        if not self.name:
            errors.append("name can't be empty")
        if not self.surname:
            errors.append("surname can't be empty")

        if errors:
            raise ValidationError(errors)

    def enrich(self, enricher: Enricher, logger: Optional[StructuredLogger] = None) -> None:
        """Populate age, gender and nationality. On failure the person is left unchanged."""
        resolved = resolve_attributes(self.name, enricher, logger=logger)
        self.age = resolved["age"]
        self.gender = resolved["gender"]
        self.nationality = resolved["nationality"]

    def save(self, repository: Repository) -> None:
        """Insert when never saved (adopting the new id), update otherwise."""
        if self.id != 0:
            repository.update_person(self)
        else:
            self.id = repository.insert_person(self)

    def delete(self, repository: Repository) -> None:
        repository.delete_person(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


def get_person_with_lock(repository: Repository, person_id: int) -> Person:
    """
    Load a person and hold an exclusive lock on its row until the transaction ends.

    Raises:
        PersonNotFoundError: No row with this id (chains the repository's NotFoundError)
        StorageError: Any other store failure, unchanged
    """
    try:
        return repository.get_person_with_lock(person_id)
    except PersonNotFoundError:
        raise
    except NotFoundError as e:
        raise PersonNotFoundError(person_id) from e


def get_all_persons(
    repository: Repository,
    person_filter: Person,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Person], int]:
    """Return one page of persons matching the filter and the total match count."""
    return repository.get_all_persons(person_filter, limit, offset)
