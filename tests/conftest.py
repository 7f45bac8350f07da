import asyncio
import sqlite3

import pytest
from fastapi.testclient import TestClient

from coursehub.clients.query_client import QueryError, SqliteQueryClient, get_query_client
from coursehub.database import init_db
from coursehub.main import app


@pytest.fixture()
def db_path(tmp_path):
    path = str(tmp_path / "coursehub_test.db")
    asyncio.run(init_db(path))
    return path


@pytest.fixture()
def client(db_path):
    return SqliteQueryClient(db_path)


@pytest.fixture()
def broken_client(tmp_path):
    """Points at a database with no tables, so every query errors."""
    return SqliteQueryClient(str(tmp_path / "empty.db"))


class UnreachableClient:
    """Fails while acquiring the connection rather than while querying."""

    table = "unreachable"

    def select(self, table, columns="*"):
        return self

    def eq(self, *args, **kwargs):
        return self

    def in_(self, *args, **kwargs):
        return self

    def order(self, *args, **kwargs):
        return self

    def count(self):
        return self

    async def execute(self):
        raise QueryError("connection refused", code="OperationalError")


@pytest.fixture()
def unreachable_client():
    return UnreachableClient()


@pytest.fixture()
def db(db_path):
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def api(client):
    app.dependency_overrides[get_query_client] = lambda: client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ------------------------------------------------------------------
# Seed helpers
# ------------------------------------------------------------------


def add_video(conn, video_id, course_id, order, chapter_id=None, **extra):
    row = {
        "id": video_id,
        "course_id": course_id,
        "chapter_id": chapter_id,
        "title": extra.pop("title", f"Video {video_id}"),
        "order": order,
        **extra,
    }
    cols = ", ".join(f'"{k}"' for k in row)
    conn.execute(
        f"INSERT INTO videos ({cols}) VALUES ({', '.join('?' for _ in row)})",
        list(row.values()),
    )
    conn.commit()


def add_profile(conn, profile_id, role="student", full_name=None, email=None, created_at="2024-01-01 00:00:00", avatar_url=None):
    conn.execute(
        "INSERT INTO profiles (id, email, full_name, avatar_url, role, created_at) VALUES (?, ?, ?, ?, ?, ?)",
        (profile_id, email, full_name, avatar_url, role, created_at),
    )
    conn.commit()


def add_course(conn, course_id, instructor_id, updated_at, title=None, total_duration_minutes=0):
    conn.execute(
        "INSERT INTO courses (id, instructor_id, title, total_duration_minutes, updated_at) VALUES (?, ?, ?, ?, ?)",
        (course_id, instructor_id, title or f"Course {course_id}", total_duration_minutes, updated_at),
    )
    conn.commit()


def add_enrollment(conn, user_id, course_id, created_at):
    conn.execute(
        "INSERT INTO enrollments (user_id, course_id, created_at) VALUES (?, ?, ?)",
        (user_id, course_id, created_at),
    )
    conn.commit()
