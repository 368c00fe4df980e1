from datetime import date
from decimal import Decimal

import pytest

from freelance_api import fixtures
from freelance_api.errors import NotFoundError, ValidationError
from freelance_api.repositories import ClientStore, ListQuery, ProjectStore, TaskStore
from freelance_api.schemas import ClientCreate, ClientUpdate

pytestmark = pytest.mark.anyio


def client_payload(name="Ada Lovelace", email="ada@engine.io", company="Analytical Engines", **extra):
    payload = {"name": name, "email": email, "company": company}
    payload.update(extra)
    return payload


def project_payload(name="Site", client_id=1, **extra):
    payload = {"name": name, "client_id": client_id}
    payload.update(extra)
    return payload


class TestIdAssignment:
    async def test_first_record_gets_id_one(self, stores):
        created = await stores.clients.create(client_payload())
        assert created["id"] == 1

    async def test_next_id_is_max_plus_one(self, clock):
        seeds = [
            {**client_payload(name="A", email="a@x.io"), "id": 1},
            {**client_payload(name="B", email="b@x.io"), "id": 5},
        ]
        store = ClientStore(seeds, clock=clock)
        created = await store.create(client_payload(name="C", email="c@x.io"))
        assert created["id"] == 6

    async def test_ids_are_not_compacted_after_delete(self, stores):
        for i in range(3):
            await stores.clients.create(client_payload(name=f"Client {i}", email=f"c{i}@x.io"))
        await stores.clients.delete(2)
        created = await stores.clients.create(client_payload(name="Late", email="late@x.io"))
        assert created["id"] == 4
        assert [c["id"] for c in await stores.clients.get_all()] == [1, 3, 4]

    async def test_duplicate_seed_ids_rejected(self, clock):
        seeds = [{**client_payload(), "id": 1}, {**client_payload(), "id": 1}]
        with pytest.raises(ValueError):
            ClientStore(seeds, clock=clock)


class TestReads:
    async def test_get_all_returns_equal_but_distinct_copies(self, seeded_stores):
        first = await seeded_stores.tasks.get_all()
        second = await seeded_stores.tasks.get_all()
        assert first == second
        assert first is not second
        assert first[0] is not second[0]
        assert first[0]["time_tracking"] is not second[0]["time_tracking"]

    async def test_mutating_returned_record_does_not_leak(self, seeded_stores):
        task = await seeded_stores.tasks.get_by_id(1)
        task["title"] = "changed"
        task["time_tracking"]["time_logs"].clear()
        fresh = await seeded_stores.tasks.get_by_id(1)
        assert fresh["title"] == "Review wireframes"
        assert len(fresh["time_tracking"]["time_logs"]) == 1

    async def test_get_all_preserves_insertion_order(self, stores):
        for name in ("Zed", "Amy", "Max"):
            await stores.clients.create(client_payload(name=name, email=f"{name.lower()}@x.io"))
        assert [c["name"] for c in await stores.clients.get_all()] == ["Zed", "Amy", "Max"]

    async def test_get_by_id_accepts_numeric_strings(self, seeded_stores):
        client = await seeded_stores.clients.get_by_id("2")
        assert client["company"] == "StartupXYZ"

    async def test_get_by_id_missing_or_malformed(self, seeded_stores):
        with pytest.raises(NotFoundError) as exc_info:
            await seeded_stores.clients.get_by_id(999)
        assert exc_info.value.message == "Client not found"
        with pytest.raises(NotFoundError):
            await seeded_stores.clients.get_by_id("abc")

    async def test_list_query_filters(self, seeded_stores):
        active = await seeded_stores.clients.get_all(ListQuery(status="active"))
        assert {c["id"] for c in active} == {1, 2, 3}

        found = await seeded_stores.clients.get_all(ListQuery(search="TECHCORP"))
        assert [c["id"] for c in found] == [1]

        project_tasks = await seeded_stores.tasks.get_all(ListQuery(project_id=2))
        assert [t["id"] for t in project_tasks] == [3, 4]

        client_projects = await seeded_stores.projects.get_all(ListQuery(client_id=1))
        assert [p["id"] for p in client_projects] == [1, 5]

    async def test_seeded_dataset_is_loaded(self, seeded_stores):
        assert len(await seeded_stores.clients.get_all()) == len(fixtures.CLIENTS)
        assert len(await seeded_stores.invoices.get_all()) == len(fixtures.INVOICES)
        client = await seeded_stores.clients.get_by_id(1)
        assert client["created_at"].isoformat() == "2024-01-15T10:00:00"


class TestCreateAndUpdate:
    async def test_create_stamps_created_at(self, stores, clock):
        created = await stores.clients.create(ClientCreate(**client_payload()))
        assert created["created_at"] == clock.now
        assert created["status"] == "active"
        assert created["notes"] == ""

    async def test_create_rejects_invalid_email(self, stores):
        with pytest.raises(ValidationError) as exc_info:
            await stores.clients.create(client_payload(email="not-an-email"))
        assert "email" in exc_info.value.message
        assert await stores.clients.get_all() == []

    async def test_update_keeps_unspecified_fields(self, stores):
        created = await stores.clients.create(client_payload(notes="VIP"))
        updated = await stores.clients.update(created["id"], ClientUpdate(company="New Co"))
        assert updated["company"] == "New Co"
        assert updated["name"] == created["name"]
        assert updated["email"] == created["email"]
        assert updated["notes"] == "VIP"
        assert updated["created_at"] == created["created_at"]

    async def test_update_never_changes_id(self, stores):
        created = await stores.clients.create(client_payload())
        updated = await stores.clients.update(created["id"], {"id": 42, "name": "Renamed"})
        assert updated["id"] == created["id"]
        assert updated["name"] == "Renamed"
        with pytest.raises(NotFoundError):
            await stores.clients.get_by_id(42)

    async def test_update_missing_record(self, stores):
        with pytest.raises(NotFoundError):
            await stores.clients.update(7, {"name": "Ghost"})

    async def test_update_cannot_null_required_field(self, stores):
        created = await stores.clients.create(client_payload())
        with pytest.raises(ValidationError):
            await stores.clients.update(created["id"], {"email": None})
        assert (await stores.clients.get_by_id(created["id"]))["email"] == "ada@engine.io"

    async def test_foreign_keys_are_normalized_to_int(self, stores):
        project = await stores.projects.create(project_payload(client_id="3", budget="1200.50"))
        assert project["client_id"] == 3
        assert project["budget"] == Decimal("1200.50")
        task = await stores.tasks.create({"title": "Wireframes", "project_id": "1"})
        assert task["project_id"] == 1


class TestDelete:
    async def test_delete_returns_true(self, stores):
        created = await stores.clients.create(client_payload())
        assert await stores.clients.delete(created["id"]) is True
        assert await stores.clients.get_all() == []

    async def test_delete_missing_client_leaves_collection_unchanged(self, seeded_stores):
        before = await seeded_stores.clients.get_all()
        with pytest.raises(NotFoundError):
            await seeded_stores.clients.delete(999)
        assert await seeded_stores.clients.get_all() == before

    async def test_delete_does_not_cascade(self, seeded_stores):
        await seeded_stores.clients.delete(1)
        projects = await seeded_stores.projects.get_all(ListQuery(client_id=1))
        assert [p["id"] for p in projects] == [1, 5]
        await seeded_stores.projects.delete(1)
        tasks = await seeded_stores.tasks.get_all(ListQuery(project_id=1))
        assert len(tasks) == 2


class TestProjectRules:
    async def test_end_date_before_start_date_rejected(self, stores):
        with pytest.raises(ValidationError):
            await stores.projects.create(project_payload(start_date="2025-03-01", end_date="2025-02-01"))

    async def test_same_start_and_end_date_allowed(self, stores):
        project = await stores.projects.create(project_payload(start_date="2025-03-01", end_date="2025-03-01"))
        assert project["start_date"] == project["end_date"] == date(2025, 3, 1)

    async def test_update_checks_merged_dates(self, stores):
        project = await stores.projects.create(project_payload(start_date="2025-03-01", end_date="2025-04-01"))
        with pytest.raises(ValidationError):
            await stores.projects.update(project["id"], {"end_date": "2025-02-15"})
        unchanged = await stores.projects.get_by_id(project["id"])
        assert unchanged["end_date"] == date(2025, 4, 1)

    async def test_negative_budget_rejected(self, stores):
        with pytest.raises(ValidationError):
            await stores.projects.create(project_payload(budget=-5))


class TestTaskRecords:
    @pytest.mark.parametrize("raw", [None, "", "legacy-blob"])
    async def test_time_tracking_normalized(self, stores, raw):
        task = await stores.tasks.create({"title": "Draft copy", "project_id": 1, "time_tracking": raw})
        assert task["time_tracking"] == {"total_time": 0, "active_timer": None, "time_logs": []}

    async def test_inconsistent_time_tracking_rejected(self, stores):
        tracking = {
            "total_time": 1000,
            "active_timer": None,
            "time_logs": [
                {
                    "id": 1,
                    "start_time": "2025-01-01T09:00:00",
                    "end_time": "2025-01-01T09:00:02",
                    "duration": 2000,
                    "date": "2025-01-01",
                }
            ],
        }
        with pytest.raises(ValidationError):
            await stores.tasks.create({"title": "Bad", "project_id": 1, "time_tracking": tracking})

    async def test_generic_update_ignores_time_tracking(self, seeded_stores):
        updated = await seeded_stores.tasks.update(1, {"title": "Renamed", "time_tracking": None})
        assert updated["title"] == "Renamed"
        assert updated["time_tracking"]["total_time"] == 5400000

    async def test_update_status(self, seeded_stores):
        moved = await seeded_stores.tasks.update_status(4, "review")
        assert moved["status"] == "review"
        with pytest.raises(ValidationError):
            await seeded_stores.tasks.update_status(4, "archived")

    async def test_simulated_latency_does_not_change_results(self, clock):
        store = TaskStore(fixtures.TASKS, latency={"get_all": 1, "get_by_id": 1}, clock=clock)
        assert len(await store.get_all()) == len(fixtures.TASKS)
        assert (await store.get_by_id(3))["title"] == "Set up authentication screens"


async def test_project_store_find_has_no_side_effects(clock):
    store = ProjectStore(fixtures.PROJECTS, clock=clock)
    assert store.find(2)["name"] == "Mobile App MVP"
    assert store.find(99) is None
