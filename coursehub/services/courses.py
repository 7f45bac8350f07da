import logging

from coursehub.clients.query_client import QueryClient, QueryError
from coursehub.models import QueryResult, parse_duration_to_minutes
from coursehub.services.base import read

logger = logging.getLogger(__name__)

VIEW = "instructor_courses_view"
COURSE_STATUSES = ("published", "draft", "under_review")
DIFFICULTIES = ("beginner", "intermediate", "advanced")

# Dashboard field -> courses column
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "thumbnail": "thumbnail_url",
    "status": "status",
    "students": "students",
    "completionRate": "completion_rate",
    "revenue": "revenue",
    "totalVideos": "total_videos",
    "pendingConfusions": "pending_confusions",
    "price": "price",
    "difficulty": "difficulty",
}


class CourseService:
    """Instructor course listing and maintenance.

    Reads go through ``instructor_courses_view``, which already emits the
    dashboard's field names (``completionRate``, ``totalDuration``, ...),
    so rows are returned untouched. Writes target the ``courses`` table
    and raise :class:`QueryError` on failure.
    """

    def __init__(self, client: QueryClient) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_instructor_courses(self, instructor_id: str) -> QueryResult:
        """Courses owned by *instructor_id*, most recently updated first."""
        result = await read(
            self.client.select(VIEW)
            .eq("instructor_id", instructor_id)
            .order("updated_at", ascending=False),
            "get_instructor_courses",
        )
        if not result.failed:
            logger.info("Fetched %d instructor courses", len(result))
        return result

    async def _get_view_row(self, course_id: str) -> dict:
        rows = await self.client.select(VIEW).eq("id", course_id).execute()
        if not rows:
            raise QueryError(f"Course {course_id} not found", code="not_found")
        return rows[0]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_course(self, instructor_id: str, course: dict) -> dict:
        """Insert a course with dashboard defaults and return its view row."""
        price = course.get("price") or 0
        difficulty = course.get("difficulty") or "beginner"
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Invalid difficulty: {difficulty}")
        status = course.get("status") or "draft"
        if status not in COURSE_STATUSES:
            raise ValueError(f"Invalid status: {status}")

        row = await self.client.insert(
            "courses",
            {
                "instructor_id": instructor_id,
                "title": course.get("title") or "Untitled Course",
                "description": course.get("description") or "",
                "thumbnail_url": course.get("thumbnail") or "/api/placeholder/400/225",
                "status": status,
                "students": 0,
                "completion_rate": 0,
                "revenue": 0,
                "total_videos": 0,
                "total_duration_minutes": parse_duration_to_minutes(course.get("totalDuration")),
                "pending_confusions": 0,
                "price": price,
                "difficulty": difficulty,
                "is_free": price == 0,
            },
        )
        logger.info("Created course %s", row["id"])
        return await self._get_view_row(row["id"])

    async def update_course(self, course_id: str, updates: dict) -> dict:
        """Apply dashboard-shaped *updates* to a course and return its view row.

        Keys are the view's field names (``thumbnail``, ``completionRate``,
        ``totalDuration`` ...); unknown keys are ignored.
        """
        if updates.get("status") is not None and updates["status"] not in COURSE_STATUSES:
            raise ValueError(f"Invalid status: {updates['status']}")
        if updates.get("difficulty") is not None and updates["difficulty"] not in DIFFICULTIES:
            raise ValueError(f"Invalid difficulty: {updates['difficulty']}")

        values = {
            column: updates[key]
            for key, column in UPDATABLE_FIELDS.items()
            if updates.get(key) is not None
        }
        if updates.get("totalDuration") is not None:
            values["total_duration_minutes"] = parse_duration_to_minutes(updates["totalDuration"])
        if "price" in values:
            values["is_free"] = values["price"] == 0

        if values:
            updated = await self.client.update("courses", values, {"id": course_id})
            if not updated:
                raise QueryError(f"Course {course_id} not found", code="not_found")
            logger.info("Updated course %s: %s", course_id, sorted(values))
        return await self._get_view_row(course_id)

    async def update_course_status(self, course_id: str, status: str) -> None:
        if status not in COURSE_STATUSES:
            raise ValueError(f"Invalid status: {status}")
        updated = await self.client.update("courses", {"status": status}, {"id": course_id})
        if not updated:
            raise QueryError(f"Course {course_id} not found", code="not_found")
        logger.info("Updated course status: %s -> %s", course_id, status)

    async def delete_course(self, course_id: str) -> None:
        deleted = await self.client.delete("courses", {"id": course_id})
        if not deleted:
            raise QueryError(f"Course {course_id} not found", code="not_found")
        logger.info("Deleted course: %s", course_id)
