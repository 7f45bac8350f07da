import logging
from datetime import datetime, timezone

from coursehub.clients.query_client import QueryClient, QueryError
from coursehub.models import QueryResult, Video
from coursehub.services.base import read

logger = logging.getLogger(__name__)


class VideoService:
    """Course videos. Reads return rows as stored; writes raise :class:`QueryError`."""

    def __init__(self, client: QueryClient) -> None:
        self.client = client

    async def get_course_videos(self, course_id: str) -> QueryResult:
        """All videos of a course, ascending by display ``order``.

        An unknown or empty course id is not an error; it just matches
        nothing.
        """
        result = await read(
            self.client.select("videos").eq("course_id", course_id).order("order"),
            "get_course_videos",
        )
        if not result.failed:
            logger.info("Found %d videos", len(result))
        return result

    async def get_chapter_videos(self, course_id: str, chapter_id: str) -> QueryResult:
        return await read(
            self.client.select("videos")
            .eq("course_id", course_id)
            .eq("chapter_id", chapter_id)
            .order("order"),
            "get_chapter_videos",
        )

    async def get_video(self, video_id: str) -> Video | None:
        """One video normalised into :class:`Video`, or None if absent or unreadable."""
        result = await read(self.client.select("videos").eq("id", video_id), "get_video")
        if not result:
            return None
        return Video.from_row(result[0])

    # ------------------------------------------------------------------
    # Writes (raise QueryError on failure)
    # ------------------------------------------------------------------

    async def update_video_order(self, video_id: str, new_order: int) -> None:
        """Move a video to display position *new_order*. Other videos are left as they are."""
        if isinstance(new_order, bool) or not isinstance(new_order, int) or new_order < 0:
            raise ValueError(f"Invalid order: {new_order!r}")
        updated = await self.client.update(
            "videos",
            {"order": new_order, "updated_at": _utc_now()},
            {"id": video_id},
        )
        if not updated:
            raise QueryError(f"Video {video_id} not found", code="not_found")
        logger.info("Video %s order set to %d", video_id, new_order)

    async def delete_video(self, video_id: str) -> None:
        deleted = await self.client.delete("videos", {"id": video_id})
        if not deleted:
            raise QueryError(f"Video {video_id} not found", code="not_found")
        logger.info("Deleted video: %s", video_id)


def _utc_now() -> str:
    # Same layout as SQLite's CURRENT_TIMESTAMP so stored values sort together.
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
