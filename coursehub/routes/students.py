from fastapi import APIRouter, Depends

from coursehub.clients.query_client import QueryClient, get_query_client
from coursehub.services.engagement import EngagementSource, get_engagement_source
from coursehub.services.students import StudentService

router = APIRouter(prefix="/api", tags=["students"])


@router.get("/instructors/{instructor_id}/students")
async def list_instructor_students(
    instructor_id: str,
    client: QueryClient = Depends(get_query_client),
    engagement: EngagementSource = Depends(get_engagement_source),
) -> dict:
    """Global student roster with placeholder engagement metrics."""
    result = await StudentService(client, engagement).get_instructor_students(instructor_id)
    return result.to_dict()


@router.get("/courses/{course_id}/students")
async def list_enrolled_students(
    course_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    result = await StudentService(client).get_enrolled_students(course_id)
    return result.to_dict()


@router.get("/courses/{course_id}/students/count")
async def count_enrolled_students(
    course_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    count = await StudentService(client).get_student_count(course_id)
    return {"course_id": course_id, "count": count}
