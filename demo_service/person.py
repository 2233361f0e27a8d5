"""
Person record: the payload written to and read back from the demo collection.

Documents use the field names ``name``, ``age`` and ``dateOfBirth``; the
``_id`` added by the server is dropped when a document is mapped back.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_NAME = "Dupont"
NEWCOMER_NAME = "Durand"
NEWCOMER_AGE = 30
DAYS_PER_YEAR = 365


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def years_ago(years: int, now: Optional[datetime] = None) -> datetime:
    """Approximate birth date for an age, using 365-day years."""
    return (now or utc_now()) - timedelta(days=years * DAYS_PER_YEAR)


class Person(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    age: int
    date_of_birth: datetime = Field(alias="dateOfBirth")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Person":
        return cls.model_validate({k: v for k, v in doc.items() if k != "_id"})

    def __str__(self) -> str:
        return (
            f"Person{{name='{self.name}', age={self.age}, "
            f"dateOfBirth={self.date_of_birth.isoformat()}}}"
        )


def generate_people(count: int, name: str = DEFAULT_NAME) -> List[Person]:
    """Build ``count`` records aged ``0 .. count-1``, all born "now"."""
    born = utc_now()
    return [Person(name=name, age=i, date_of_birth=born) for i in range(count)]


def newcomer() -> Person:
    """The record inserted by the transaction step."""
    return Person(
        name=NEWCOMER_NAME,
        age=NEWCOMER_AGE,
        date_of_birth=years_ago(NEWCOMER_AGE),
    )
