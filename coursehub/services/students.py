import logging
from dataclasses import asdict

from coursehub.clients.query_client import QueryClient
from coursehub.config import settings
from coursehub.models import EnrolledStudent, InstructorStudent, QueryResult
from coursehub.services.base import read
from coursehub.services.engagement import EngagementSource, RandomEngagement

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = "Unknown Student"
PROFILE_COLUMNS = "id, email, full_name, role, created_at"


class StudentService:
    """Student rosters for instructors."""

    def __init__(self, client: QueryClient, engagement: EngagementSource | None = None) -> None:
        self.client = client
        self.engagement = engagement or RandomEngagement()

    def _to_instructor_student(self, row: dict) -> InstructorStudent:
        e = self.engagement
        return InstructorStudent(
            id=row["id"],
            name=row.get("full_name") or UNKNOWN_STUDENT,
            email=row.get("email"),
            role=row.get("role") or settings.student_role,
            created_at=row.get("created_at"),
            lastActive=e.last_active(),
            learnRate=e.learn_rate(),
            progress=e.progress(),
            needsHelp=e.needs_help(),
            courseId=settings.placeholder_course_id,
            strugglingAt=e.struggling_at(),
        )

    async def get_instructor_students(self, instructor_id: str) -> QueryResult:
        """Every student profile, newest first, with placeholder engagement metrics.

        *instructor_id* does not narrow the query: the roster is global.
        Use :meth:`get_enrolled_students` for a course-scoped list.
        """
        result = await read(
            self.client.select("profiles", PROFILE_COLUMNS)
            .eq("role", settings.student_role)
            .order("created_at", ascending=False),
            "get_instructor_students",
        )
        if result.failed:
            return result
        logger.info("Fetched %d students", len(result))
        return QueryResult(
            rows=[self._to_instructor_student(row).to_dict() for row in result],
            source=result.source,
        )

    async def get_enrolled_students(self, course_id: str) -> QueryResult:
        """Students enrolled in *course_id*, most recent enrollment first."""
        enrollments = await read(
            self.client.select("enrollments", "user_id, created_at")
            .eq("course_id", course_id)
            .order("created_at", ascending=False),
            "get_enrolled_students",
        )
        if enrollments.failed or not enrollments:
            return enrollments

        profiles = await read(
            self.client.select("profiles", "id, full_name, email, avatar_url").in_(
                "id", [e["user_id"] for e in enrollments]
            ),
            "get_enrolled_students",
        )
        if profiles.failed:
            return profiles

        by_id = {p["id"]: p for p in profiles}
        students = []
        for enrollment in enrollments:
            profile = by_id.get(enrollment["user_id"])
            if profile is None:
                # Enrollment for a deleted profile.
                continue
            student = EnrolledStudent(
                id=profile["id"],
                name=profile.get("full_name") or UNKNOWN_STUDENT,
                email=profile.get("email"),
                avatarUrl=profile.get("avatar_url") or None,
                enrolledAt=enrollment.get("created_at"),
            )
            students.append(asdict(student))
        return QueryResult(rows=students, source=enrollments.source)

    async def get_student_count(self, course_id: str) -> int:
        """Number of enrollments in *course_id*; 0 when the count cannot be read."""
        result = await read(
            self.client.select("enrollments").eq("course_id", course_id).count(),
            "get_student_count",
        )
        return result[0]["count"] if result else 0
