"""User domain model — one row of the ``users`` table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class User:
    """A stored user. ``id`` is assigned by the store on insert."""

    name: str
    age: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "age": self.age}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        age = row.get("age")
        return cls(
            id=int(row["id"]),
            name=row["name"],
            age=int(age) if age is not None else None,
        )
