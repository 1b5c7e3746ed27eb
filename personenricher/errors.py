"""
Error taxonomy for person enrichment and persistence.

Every failure raised by the core derives from PersonEnricherError so the
request layer can map it to a response without matching on message text.
"""

from typing import List, Optional


class PersonEnricherError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationError(PersonEnricherError):
    """One or more field rules were violated. Messages are collected, not short-circuited."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ResolverError(PersonEnricherError):
    """A single attribute lookup failed (transport, malformed body, or undeterminable value)."""

    def __init__(self, attribute: str, message: str, undetermined: bool = False):
        self.attribute = attribute
        self.undetermined = undetermined
        super().__init__(f"{attribute}: {message}")


class EnrichmentError(PersonEnricherError):
    """Aggregates the resolver failures of one enrichment attempt."""

    def __init__(self, errors: List[ResolverError]):
        self.errors = list(errors)
        joined = "; ".join(str(e) for e in self.errors)
        super().__init__(f"failed to enrich person: {joined}")

    @property
    def failed_attributes(self) -> List[str]:
        return [e.attribute for e in self.errors]


class NotFoundError(PersonEnricherError):
    """A locked read found no row."""
    pass


class PersonNotFoundError(NotFoundError):
    def __init__(self, person_id: int):
        self.person_id = person_id
        super().__init__(f"person with id {person_id} not found")


class IntegrityError(PersonEnricherError):
    """A write affected an unexpected number of rows."""

    def __init__(self, operation: str, rowcount: Optional[int]):
        self.operation = operation
        self.rowcount = rowcount
        super().__init__(f"{operation} affected {rowcount} rows instead of 1")


class StorageError(PersonEnricherError):
    """Driver or transport failure from the relational store."""
    pass
