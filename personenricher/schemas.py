"""
Pydantic schemas for the persons HTTP API.

Required-field checks are left to Person.validate so that every violation
is reported together; the schemas only enforce types.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .person import Person


class PersonIn(BaseModel):
    """Body of POST /persons and PUT /persons/{id}."""

    name: str = Field("", examples=["Ada"])
    surname: str = Field("", examples=["Lovelace"])
    patronymic: Optional[str] = Field(None, examples=["Augusta"])

    def to_person(self) -> Person:
        return Person.from_dict(self.model_dump())


class PersonOut(BaseModel):
    id: int = Field(..., examples=[1])
    name: str = Field(..., examples=["Ada"])
    surname: str = Field(..., examples=["Lovelace"])
    patronymic: str = Field("", examples=[""])
    age: int = Field(0, examples=[36])
    gender: str = Field("", examples=["female"])
    nationality: str = Field("", examples=["GB"])

    @classmethod
    def from_person(cls, person: Person) -> "PersonOut":
        return cls(**person.to_dict())


class PersonPage(BaseModel):
    persons: List[PersonOut]
    total: int


class ErrorOut(BaseModel):
    detail: str
    errors: List[str] = []
