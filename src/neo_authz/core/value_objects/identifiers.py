"""Identifier value objects for neo-authz."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID, uuid4


NIL_UUID = UUID(int=0)


@dataclass(frozen=True)
class UserId:
    """User identifier value object.

    Wraps a UUID and rejects the nil UUID, so a ``UserId`` that exists is
    always a usable lookup key.
    """
    value: UUID

    def __post_init__(self):
        if not isinstance(self.value, UUID):
            try:
                object.__setattr__(self, 'value', UUID(str(self.value)))
            except (ValueError, TypeError, AttributeError):
                raise ValueError(f"UserId must be a valid UUID, got: {self.value!r}")
        if self.value == NIL_UUID:
            raise ValueError("UserId cannot be the nil UUID")

    @classmethod
    def new(cls) -> 'UserId':
        """Generate a new random UserId."""
        return cls(uuid4())

    @classmethod
    def from_string(cls, value: Optional[str]) -> 'UserId':
        """Parse a UserId from its external string form.

        Raises:
            ValueError: If the value is None, blank, malformed or the nil UUID
        """
        if value is None or not str(value).strip():
            raise ValueError("UserId string cannot be null or empty")
        try:
            parsed = UUID(str(value).strip())
        except ValueError:
            raise ValueError(f"UserId string is not a valid UUID: {value!r}")
        return cls(parsed)

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"UserId(value={self.value!r})"
