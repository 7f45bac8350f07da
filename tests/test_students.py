import logging
import random

from coursehub.services.engagement import EngagementSource, RandomEngagement, get_engagement_source
from coursehub.services.students import StudentService

from conftest import add_enrollment, add_profile


def _seed_roster(db, n=20):
    for i in range(n):
        add_profile(
            db,
            f"s{i}",
            full_name=f"Student {i}",
            email=f"s{i}@example.com",
            created_at=f"2024-01-{i + 1:02d} 00:00:00",
        )
    add_profile(db, "t1", role="instructor", full_name="Teacher")
    add_profile(db, "a1", role="admin", full_name="Admin")


async def test_only_students_regardless_of_instructor(client, db):
    _seed_roster(db, n=5)
    service = StudentService(client)

    for instructor_id in ("t1", "someone-else", ""):
        result = await service.get_instructor_students(instructor_id)
        assert not result.failed
        assert len(result) == 5
        assert {row["role"] for row in result} == {"student"}


async def test_newest_profiles_first(client, db):
    _seed_roster(db, n=5)
    result = await StudentService(client).get_instructor_students("t1")
    created = [row["created_at"] for row in result]
    assert created == sorted(created, reverse=True)


async def test_synthetic_fields_within_ranges(client, db):
    _seed_roster(db, n=20)
    for _ in range(5):
        result = await StudentService(client).get_instructor_students("t1")
        for row in result:
            hours, suffix = row["lastActive"].split(" ", 1)
            assert suffix == "hours ago"
            assert 0 <= int(hours) <= 23
            assert 30 <= row["learnRate"] <= 59
            assert 0 <= row["progress"] <= 99
            assert isinstance(row["needsHelp"], bool)
            assert row["courseId"] == "1"
            assert row.get("strugglingAt", "React Hooks") == "React Hooks"


async def test_struggling_at_omitted_when_absent(client, db):
    _seed_roster(db, n=20)
    result = await StudentService(client, RandomEngagement(random.Random(3))).get_instructor_students("t1")
    for row in result:
        if "strugglingAt" in row:
            assert row["strugglingAt"] == "React Hooks"
    assert any("strugglingAt" not in row for row in result)


async def test_missing_full_name_falls_back(client, db):
    add_profile(db, "s1", full_name=None, email="anon@example.com")
    result = await StudentService(client).get_instructor_students("t1")
    assert result[0]["name"] == "Unknown Student"
    assert result[0]["email"] == "anon@example.com"


async def test_seeded_source_is_deterministic(client, db):
    _seed_roster(db, n=10)
    first = await StudentService(client, RandomEngagement(random.Random(42))).get_instructor_students("t1")
    second = await StudentService(client, RandomEngagement(random.Random(42))).get_instructor_students("t1")
    assert list(first) == list(second)


async def test_default_source_varies_between_calls(client, db):
    _seed_roster(db, n=20)
    service = StudentService(client)
    first = await service.get_instructor_students("t1")
    second = await service.get_instructor_students("t1")

    def synthetic(result):
        return [(r["learnRate"], r["progress"], r["needsHelp"]) for r in result]

    assert synthetic(first) != synthetic(second)


class FixedEngagement:
    def last_active(self):
        return "0 hours ago"

    def learn_rate(self):
        return 30

    def progress(self):
        return 0

    def needs_help(self):
        return True

    def struggling_at(self):
        return None


async def test_engagement_source_is_pluggable(client, db):
    add_profile(db, "s1", full_name="Ada")
    result = await StudentService(client, FixedEngagement()).get_instructor_students("t1")
    assert result[0] == {
        "id": "s1",
        "name": "Ada",
        "email": None,
        "role": "student",
        "created_at": "2024-01-01 00:00:00",
        "lastActive": "0 hours ago",
        "learnRate": 30,
        "progress": 0,
        "needsHelp": True,
        "courseId": "1",
    }


async def test_roster_failure(broken_client, unreachable_client):
    for c in (broken_client, unreachable_client):
        result = await StudentService(c).get_instructor_students("t1")
        assert list(result) == []
        assert result.failed


async def test_roster_logs_no_personal_data(client, db, caplog):
    add_profile(db, "s1", full_name="Grace Hopper", email="grace@example.com")
    with caplog.at_level(logging.DEBUG, logger="coursehub"):
        await StudentService(client).get_instructor_students("t1")
    assert "grace@example.com" not in caplog.text
    assert "Grace Hopper" not in caplog.text


async def test_enrolled_students(client, db):
    add_profile(db, "s1", full_name="Ada", email="ada@example.com", avatar_url="https://img/ada.png")
    add_profile(db, "s2", full_name=None, email="anon@example.com")
    add_profile(db, "s3", full_name="Not enrolled")
    add_enrollment(db, "s1", "c1", "2024-01-01 00:00:00")
    add_enrollment(db, "s2", "c1", "2024-02-01 00:00:00")
    add_enrollment(db, "s3", "c2", "2024-02-01 00:00:00")

    service = StudentService(client)
    result = await service.get_enrolled_students("c1")

    assert [row["id"] for row in result] == ["s2", "s1"]
    assert result[0]["name"] == "Unknown Student"
    assert result[0]["avatarUrl"] is None
    assert result[1]["avatarUrl"] == "https://img/ada.png"
    assert result[1]["enrolledAt"] == "2024-01-01 00:00:00"

    assert await service.get_student_count("c1") == 2
    assert await service.get_student_count("c9") == 0
    assert list(await service.get_enrolled_students("c9")) == []


async def test_enrolled_students_failure(broken_client):
    service = StudentService(broken_client)
    result = await service.get_enrolled_students("c1")
    assert result.failed
    assert await service.get_student_count("c1") == 0


def test_engagement_sources_satisfy_protocol():
    assert isinstance(RandomEngagement(), EngagementSource)
    assert isinstance(get_engagement_source(), EngagementSource)
    assert isinstance(FixedEngagement(), EngagementSource)
    assert not isinstance(object(), EngagementSource)


async def test_student_count_is_counted_in_the_database(client, db):
    for i in range(7):
        add_profile(db, f"s{i}")
        add_enrollment(db, f"s{i}", "c1" if i < 5 else "c2", "2024-01-01 00:00:00")

    service = StudentService(client)
    assert await service.get_student_count("c1") == 5
    assert await service.get_student_count("c2") == 2


async def test_student_count_unreachable_is_zero(unreachable_client):
    assert await StudentService(unreachable_client).get_student_count("c1") == 0
