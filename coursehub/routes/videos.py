from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from coursehub.clients.query_client import QueryClient, QueryError, get_query_client
from coursehub.routes.errors import raise_for_write_error
from coursehub.services.videos import VideoService

router = APIRouter(prefix="/api", tags=["videos"])


class VideoOrderUpdate(BaseModel):
    order: int


@router.get("/courses/{course_id}/videos")
async def list_course_videos(
    course_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    result = await VideoService(client).get_course_videos(course_id)
    return result.to_dict()


@router.get("/courses/{course_id}/chapters/{chapter_id}/videos")
async def list_chapter_videos(
    course_id: str, chapter_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    result = await VideoService(client).get_chapter_videos(course_id, chapter_id)
    return result.to_dict()


@router.get("/videos/{video_id}")
async def get_video(
    video_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    video = await VideoService(client).get_video(video_id)
    if video is None:
        raise HTTPException(status_code=404, detail=f"Video {video_id} not found")
    return asdict(video)


@router.patch("/videos/{video_id}/order")
async def update_video_order(
    video_id: str,
    body: VideoOrderUpdate,
    client: QueryClient = Depends(get_query_client),
) -> dict:
    try:
        await VideoService(client).update_video_order(video_id, body.order)
    except (ValueError, QueryError) as e:
        raise_for_write_error(e)
    return {"id": video_id, "order": body.order}


@router.delete("/videos/{video_id}")
async def delete_video(
    video_id: str, client: QueryClient = Depends(get_query_client)
) -> dict:
    try:
        await VideoService(client).delete_video(video_id)
    except QueryError as e:
        raise_for_write_error(e)
    return {"id": video_id, "deleted": True}
