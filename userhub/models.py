"""Domain models for the user directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a user record stored in the directory database.

    ``id`` is ``None`` until the record has been saved.
    """

    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None


__all__ = ["User"]
