from fastapi import APIRouter, Depends
from pydantic import BaseModel

from coursehub.clients.query_client import QueryClient, QueryError, get_query_client
from coursehub.routes.errors import raise_for_write_error
from coursehub.services.courses import CourseService

router = APIRouter(prefix="/api", tags=["courses"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class CourseCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    thumbnail: str | None = None
    status: str | None = None
    price: float | None = None
    difficulty: str | None = None
    totalDuration: str | None = None


class CourseUpdate(CourseCreate):
    students: int | None = None
    completionRate: int | None = None
    revenue: float | None = None
    totalVideos: int | None = None
    pendingConfusions: int | None = None


class CourseStatusUpdate(BaseModel):
    status: str


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.get("/instructors/{instructor_id}/courses")
async def list_instructor_courses(
    instructor_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    result = await CourseService(client).get_instructor_courses(instructor_id)
    return result.to_dict()


@router.post("/instructors/{instructor_id}/courses", status_code=201)
async def create_course(
    instructor_id: str,
    body: CourseCreate,
    client: QueryClient = Depends(get_query_client),
) -> dict:
    try:
        return await CourseService(client).create_course(
            instructor_id, body.model_dump(exclude_none=True)
        )
    except (ValueError, QueryError) as e:
        raise_for_write_error(e)


@router.patch("/courses/{course_id}")
async def update_course(
    course_id: str,
    body: CourseUpdate,
    client: QueryClient = Depends(get_query_client),
) -> dict:
    try:
        return await CourseService(client).update_course(
            course_id, body.model_dump(exclude_none=True)
        )
    except (ValueError, QueryError) as e:
        raise_for_write_error(e)


@router.patch("/courses/{course_id}/status")
async def update_course_status(
    course_id: str,
    body: CourseStatusUpdate,
    client: QueryClient = Depends(get_query_client),
) -> dict:
    try:
        await CourseService(client).update_course_status(course_id, body.status)
    except (ValueError, QueryError) as e:
        raise_for_write_error(e)
    return {"id": course_id, "status": body.status}


@router.delete("/courses/{course_id}")
async def delete_course(
    course_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    """Delete a course; its videos and enrollments go with it."""
    try:
        await CourseService(client).delete_course(course_id)
    except QueryError as e:
        raise_for_write_error(e)
    return {"id": course_id, "deleted": True}
