import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from coursehub.config import settings
from coursehub.database import init_db
from coursehub.routes import courses, students, videos


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create SQLite tables and views on startup. Nothing to tear down:
    query clients open a connection per query."""
    configure_logging()
    await init_db()
    yield


app = FastAPI(
    title="coursehub",
    description="Course, video and student roster data for the instructor dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(videos.router)
app.include_router(courses.router)
app.include_router(students.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


def run() -> None:
    uvicorn.run("coursehub.main:app", host=settings.host, port=settings.port)
