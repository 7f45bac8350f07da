import aiosqlite

from coursehub.config import settings

CREATE_PROFILES = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    email TEXT,
    full_name TEXT,
    avatar_url TEXT,
    role TEXT NOT NULL DEFAULT 'student',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

CREATE_COURSES = """
CREATE TABLE IF NOT EXISTS courses (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    instructor_id TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    thumbnail_url TEXT,
    status TEXT NOT NULL DEFAULT 'draft'
        CHECK (status IN ('published', 'draft', 'under_review')),
    price REAL DEFAULT 0,
    is_free INTEGER DEFAULT 0,
    total_videos INTEGER DEFAULT 0,
    total_duration_minutes INTEGER DEFAULT 0,
    students INTEGER DEFAULT 0,
    revenue REAL DEFAULT 0,
    completion_rate INTEGER DEFAULT 0,
    pending_confusions INTEGER DEFAULT 0,
    difficulty TEXT DEFAULT 'beginner'
        CHECK (difficulty IN ('beginner', 'intermediate', 'advanced')),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

CREATE_VIDEOS = """
CREATE TABLE IF NOT EXISTS videos (
    id TEXT PRIMARY KEY,
    course_id TEXT NOT NULL,
    chapter_id TEXT,
    title TEXT NOT NULL,
    description TEXT,
    duration TEXT,
    duration_seconds INTEGER,
    video_url TEXT,
    thumbnail_url TEXT,
    filename TEXT,
    file_size INTEGER,
    status TEXT,
    "order" INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (course_id) REFERENCES courses(id) ON DELETE CASCADE
)
"""

CREATE_ENROLLMENTS = """
CREATE TABLE IF NOT EXISTS enrollments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    course_id TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(user_id, course_id),
    FOREIGN KEY (user_id) REFERENCES profiles(id) ON DELETE CASCADE,
    FOREIGN KEY (course_id) REFERENCES courses(id) ON DELETE CASCADE
)
"""

CREATE_COURSES_UPDATED_AT = """
CREATE TRIGGER IF NOT EXISTS courses_updated_at
AFTER UPDATE ON courses
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE courses SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
END
"""

# UI-ready projection of courses. Column names match what the instructor
# dashboard renders, so rows are returned without any mapping.
CREATE_INSTRUCTOR_COURSES_VIEW = """
CREATE VIEW IF NOT EXISTS instructor_courses_view AS
SELECT
    c.id,
    c.title,
    c.thumbnail_url AS thumbnail,
    c.status,
    c.students,
    c.completion_rate AS "completionRate",
    c.revenue,
    CASE
        WHEN age < 60 THEN 'just now'
        WHEN age < 3600 THEN (age / 60) || ' minutes ago'
        WHEN age < 86400 THEN (age / 3600) || ' hours ago'
        WHEN age < 604800 THEN (age / 86400) || ' days ago'
        WHEN age < 2592000 THEN (age / 604800) || ' weeks ago'
        ELSE (age / 2592000) || ' months ago'
    END AS "lastUpdated",
    c.total_videos AS "totalVideos",
    CASE
        WHEN c.total_duration_minutes IS NULL OR c.total_duration_minutes = 0 THEN '0m'
        WHEN c.total_duration_minutes < 60 THEN c.total_duration_minutes || 'm'
        ELSE (c.total_duration_minutes / 60) || 'h '
            || (c.total_duration_minutes % 60) || 'm'
    END AS "totalDuration",
    c.pending_confusions AS "pendingConfusions",
    c.instructor_id,
    c.created_at,
    c.updated_at
FROM (
    SELECT *, CAST(strftime('%s', 'now') - strftime('%s', updated_at) AS INTEGER) AS age
    FROM courses
) AS c
"""

_DDL = [
    CREATE_PROFILES,
    CREATE_COURSES,
    CREATE_VIDEOS,
    CREATE_ENROLLMENTS,
    CREATE_COURSES_UPDATED_AT,
    CREATE_INSTRUCTOR_COURSES_VIEW,
]


async def init_db(db_path: str | None = None) -> None:
    """Create all tables and views. Called once at server startup via FastAPI lifespan."""
    async with aiosqlite.connect(db_path or settings.database_path) as db:
        for stmt in _DDL:
            await db.execute(stmt)
        await db.commit()


async def get_async_conn(db_path: str | None = None) -> aiosqlite.Connection:
    """Async connection with dict-like rows. Caller is responsible for closing it."""
    conn = await aiosqlite.connect(db_path or settings.database_path)
    await conn.execute(f"PRAGMA busy_timeout = {int(settings.busy_timeout_ms)}")
    await conn.execute("PRAGMA foreign_keys = ON")
    conn.row_factory = aiosqlite.Row
    return conn
