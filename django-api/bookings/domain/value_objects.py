"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class SessionId:
    """Unique identifier for a LearningSession."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BookingId:
    """Unique identifier for a Booking."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class WaitlistEntryId:
    """Unique identifier for a WaitlistEntry."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Identifier of an employee. Users live outside this app."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BookingReference:
    """Human-readable booking reference, e.g. BK-1A2B3C4D."""

    value: str

    def __post_init__(self) -> None:
        if not self.value.startswith("BK-") or len(self.value) != 11:
            raise ValueError("Booking reference must look like BK-XXXXXXXX")

    @classmethod
    def generate(cls) -> Self:
        return cls(value="BK-" + uuid4().hex[:8].upper())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FeedbackRating:
    """Feedback score between 1 and 5 inclusive."""

    value: int

    def __post_init__(self) -> None:
        if not 1 <= self.value <= 5:
            raise ValueError("Rating must be between 1 and 5")
