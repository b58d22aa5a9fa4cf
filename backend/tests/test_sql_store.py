import pytest

from conftest import TODAY, USER, days_ago
from schemas import RoutineType
from services.profile_service import ProfileService
from services.routine_service import RoutineService
from stores.base import DuplicateRecordError, RecordNotFoundError
from stores.sql_store import SqlRoutineLogStore, SqlAchievementStore, SqlProfileStore


@pytest.fixture
def sql_logs(session_factory):
    return SqlRoutineLogStore(session_factory)


@pytest.fixture
def sql_achievements(session_factory):
    return SqlAchievementStore(session_factory)


@pytest.fixture
def sql_profiles(session_factory):
    return SqlProfileStore(session_factory)


async def test_insert_and_get(sql_logs):
    created = await sql_logs.insert(USER, TODAY, {"morning_completed": True})
    assert created.id == "1"
    assert created.morning_completed is True
    assert created.evening_completed is False
    assert created.created_at is not None

    fetched = await sql_logs.get(USER, TODAY)
    assert fetched == created
    assert await sql_logs.get(USER, days_ago(1)) is None
    assert await sql_logs.get("someone-else", TODAY) is None


async def test_list_is_per_user_newest_first(sql_logs):
    await sql_logs.insert(USER, days_ago(2), {})
    await sql_logs.insert(USER, TODAY, {})
    await sql_logs.insert("someone-else", days_ago(1), {})

    logs = await sql_logs.list(USER)
    assert [log.date for log in logs] == [TODAY, days_ago(2)]


async def test_duplicate_date_is_rejected(sql_logs):
    await sql_logs.insert(USER, TODAY, {"morning_completed": True})
    with pytest.raises(DuplicateRecordError):
        await sql_logs.insert(USER, TODAY, {"evening_completed": True})
    # Session is still usable after the rollback
    assert len(await sql_logs.list(USER)) == 1


async def test_update_touches_only_given_flag(sql_logs):
    created = await sql_logs.insert(USER, TODAY, {"morning_completed": True})
    updated = await sql_logs.update(created.id, {"evening_completed": True})
    assert updated.morning_completed is True
    assert updated.evening_completed is True


async def test_update_missing_log(sql_logs):
    with pytest.raises(RecordNotFoundError):
        await sql_logs.update("99", {"morning_completed": True})


async def test_achievement_names_are_unique_per_user(sql_achievements):
    await sql_achievements.insert(USER, "Getting Started", "Completed routines for 3 days in a row", "check")
    await sql_achievements.insert("someone-else", "Getting Started", "Completed routines for 3 days in a row", "check")
    with pytest.raises(DuplicateRecordError):
        await sql_achievements.insert(USER, "Getting Started", "again", "check")

    mine = await sql_achievements.list(USER)
    assert [a.name for a in mine] == ["Getting Started"]
    assert mine[0].icon.value == "check"


async def test_routine_service_end_to_end(sql_logs, sql_achievements):
    service = RoutineService(sql_logs, sql_achievements, clock=lambda: TODAY)
    for n in (2, 1):
        await service.toggle(USER, days_ago(n), RoutineType.MORNING)
        await service.toggle(USER, days_ago(n), RoutineType.EVENING)

    result = await service.toggle(USER, TODAY, RoutineType.EVENING)
    assert result.snapshot.current_streak == 3
    assert [a.name for a in result.snapshot.new_achievements] == ["Getting Started"]

    again = await service.refresh(USER)
    assert again.new_achievements == []
    assert len(await sql_achievements.list(USER)) == 1


async def test_profile_created_on_first_read(sql_profiles):
    service = ProfileService(sql_profiles)
    profile = await service.get(USER)
    assert profile.id == USER
    assert profile.skin_type is None
    assert (await service.get(USER)).created_at == profile.created_at


async def test_profile_update(sql_profiles):
    service = ProfileService(sql_profiles)
    profile = await service.update(USER, {
        "full_name": "Sam Lee",
        "skin_type": "combination",
        "skin_tone": "olive",
        "morning_reminder": "07:30",
        "evening_reminder": "",
        "is_admin": True,
    })
    assert profile.full_name == "Sam Lee"
    assert profile.skin_type.value == "combination"
    assert profile.skin_tone.value == "olive"
    assert profile.morning_reminder == "07:30"
    assert profile.evening_reminder is None
    assert profile.updated_at is not None


@pytest.mark.parametrize("data", [
    {"skin_type": "scaly"},
    {"skin_tone": "green"},
    {"morning_reminder": "7:30am"},
    {"evening_reminder": "24:00"},
])
async def test_profile_update_rejects_bad_values(sql_profiles, data):
    with pytest.raises(ValueError):
        await ProfileService(sql_profiles).update(USER, data)


class RacingProfileStore(SqlProfileStore):
    """Another request creates the profile between our read and our insert."""

    def __init__(self, session_factory, visible_after_race=True):
        super().__init__(session_factory)
        self.visible_after_race = visible_after_race
        self.reads = 0

    async def get(self, user_id):
        self.reads += 1
        if self.reads == 1 or not self.visible_after_race:
            return None
        return await super().get(user_id)

    async def insert(self, user_id):
        await super().insert(user_id)
        raise DuplicateRecordError("profiles: duplicate record")


async def test_profile_created_by_parallel_request(session_factory):
    store = RacingProfileStore(session_factory)
    profile = await ProfileService(store).get(USER)
    assert profile.id == USER
    assert store.reads == 2


async def test_profile_lost_after_parallel_create(session_factory):
    store = RacingProfileStore(session_factory, visible_after_race=False)
    with pytest.raises(RecordNotFoundError):
        await ProfileService(store).get(USER)
