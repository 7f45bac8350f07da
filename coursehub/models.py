import re
from dataclasses import asdict, dataclass
from typing import Any


class QueryResult(list):
    """Rows from one read, plus whether the read actually succeeded.

    A plain ``list`` of row dicts, so a failed read compares equal to
    ``[]`` and serialises like any other list. Check ``failed`` to tell
    "no rows" apart from "query failed".
    """

    def __init__(self, rows: Any = (), source: str = "", error: str | None = None) -> None:
        super().__init__(rows)
        self.source = source  # table or view the rows came from
        self.error = error

    @classmethod
    def failure(cls, source: str, error: Exception | str) -> "QueryResult":
        return cls(source=source, error=str(error) or type(error).__name__)

    @property
    def rows(self) -> list[dict]:
        return list(self)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        return {"data": list(self), "source": self.source, "error": self.error}

    def __repr__(self) -> str:
        return f"QueryResult({list.__repr__(self)}, source={self.source!r}, error={self.error!r})"


# ------------------------------------------------------------------
# Duration formatting
# ------------------------------------------------------------------


def format_duration(seconds: int | float | None) -> str:
    """Seconds as "M:SS", or "H:MM:SS" once past an hour."""
    if not seconds or seconds <= 0:
        return "0:00"
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_duration(duration: str | None) -> int:
    """Inverse of :func:`format_duration`. Anything unparseable is 0."""
    if not duration:
        return 0
    try:
        parts = [int(p) for p in duration.strip().split(":")]
    except ValueError:
        return 0
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    return 0


def parse_duration_to_minutes(duration: str | None) -> int:
    """Parse "12h 30m", "2h" or "45m" into minutes."""
    if not duration:
        return 0
    hours = re.search(r"(\d+)h", duration)
    minutes = re.search(r"(\d+)m", duration)
    return (int(hours.group(1)) if hours else 0) * 60 + (int(minutes.group(1)) if minutes else 0)


# ------------------------------------------------------------------
# Row shapes
# ------------------------------------------------------------------


def _first(row: dict, *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


@dataclass
class Video:
    id: str
    course_id: str
    title: str
    order: int = 0
    chapter_id: str | None = None
    description: str | None = None
    duration: str | None = None  # "M:SS" / "H:MM:SS"
    duration_seconds: int | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    status: str | None = None  # pending | uploading | processing | complete | error

    @classmethod
    def from_row(cls, row: dict) -> "Video":
        """Build from a stored row, accepting the camelCase spellings some callers send."""
        duration = _first(row, "duration")
        seconds = _first(row, "duration_seconds", "durationSeconds")
        if duration is None and seconds is not None:
            duration = format_duration(seconds)
        elif seconds is None and duration is not None:
            seconds = parse_duration(str(duration))
        return cls(
            id=row["id"],
            course_id=_first(row, "course_id", "courseId"),
            title=row.get("title") or "",
            order=int(row.get("order") or 0),
            chapter_id=_first(row, "chapter_id", "chapterId"),
            description=row.get("description"),
            duration=duration,
            duration_seconds=seconds,
            video_url=_first(row, "video_url", "videoUrl", "url"),
            thumbnail_url=_first(row, "thumbnail_url", "thumbnailUrl"),
            status=row.get("status"),
        )


@dataclass
class InstructorStudent:
    id: str
    name: str
    email: str | None
    role: str
    created_at: str | None
    lastActive: str
    learnRate: int
    progress: int
    needsHelp: bool
    courseId: str
    strugglingAt: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if data["strugglingAt"] is None:
            del data["strugglingAt"]
        return data


@dataclass
class EnrolledStudent:
    id: str
    name: str
    email: str | None
    avatarUrl: str | None
    enrolledAt: str | None
