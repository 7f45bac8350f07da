import random
from typing import Protocol, runtime_checkable

from coursehub.config import settings


@runtime_checkable
class EngagementSource(Protocol):
    """Supplies the roster fields that have no backing storage."""

    def last_active(self) -> str: ...

    def learn_rate(self) -> int: ...

    def progress(self) -> int: ...

    def needs_help(self) -> bool: ...

    def struggling_at(self) -> str | None: ...


class RandomEngagement:
    """Placeholder engagement metrics for the instructor student roster.

    None of these values are stored anywhere yet; they are generated on
    every request. Pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def last_active(self) -> str:
        return f"{self.rng.randint(0, 23)} hours ago"

    def learn_rate(self) -> int:
        return self.rng.randint(30, 59)

    def progress(self) -> int:
        return self.rng.randint(0, 99)

    def needs_help(self) -> bool:
        return self.rng.random() < 0.2

    def struggling_at(self) -> str | None:
        return settings.struggling_topic if self.rng.random() < 0.3 else None


def get_engagement_source() -> EngagementSource:
    """FastAPI dependency. Override in tests with ``app.dependency_overrides``."""
    return RandomEngagement()
