import json

import pytest

from components.preferences.context import AppContext, RECENT_WORKERS_LIMIT
from conftest import create_shared_report


async def test_worker_crud(auth_client):
    created = await auth_client.post("/workers/", json={"name": "Lidia", "color": "#ef4444"})
    assert created.status_code == 201
    worker_id = created.json()["id"]
    assert created.json()["is_primary"] is False

    updated = await auth_client.put(f"/workers/{worker_id}", json={"name": "Lida"})
    assert updated.json()["name"] == "Lida"
    assert updated.json()["color"] == "#ef4444"

    assert (await auth_client.delete(f"/workers/{worker_id}")).status_code == 200
    assert (await auth_client.put(f"/workers/{worker_id}", json={"name": "x"})).status_code == 404


async def test_bad_color_is_rejected(auth_client):
    response = await auth_client.post("/workers/", json={"name": "Lidia", "color": "red"})

    assert response.status_code == 422


async def test_primary_worker_cannot_be_deleted(auth_client):
    primary_id = (await auth_client.get("/workers/")).json()[0]["id"]

    response = await auth_client.delete(f"/workers/{primary_id}")

    assert response.status_code == 422


async def test_deleted_worker_keeps_name_on_assignments(office):
    api, client_id, primary_id, helper_id = office
    report = await create_shared_report(api, client_id, primary_id, helper_id)

    await api.delete(f"/workers/{helper_id}")

    day = (await api.get(f"/work-days/{report['work_days'][0]['id']}")).json()
    orphan = [a for a in day["assignments"] if a["worker_id"] is None]
    assert [a["deleted_worker_name"] for a in orphan] == ["Lidia"]
    assert sum(a["amount"] for a in day["assignments"]) == pytest.approx(100)


async def test_workers_list_counts_assignments(office):
    api, client_id, primary_id, helper_id = office
    await create_shared_report(api, client_id, primary_id, helper_id)
    await api.post("/reports/", json={
        "client_id": client_id, "date": "2024-03-02", "work_days": [{"date": "2024-03-02", "hours": 1}],
    })

    workers = {w["id"]: w["assignments_count"] for w in (await api.get("/workers/")).json()}

    assert workers == {primary_id: 2, helper_id: 1}


async def test_sorted_workers(auth_client):
    primary_id = (await auth_client.get("/workers/")).json()[0]["id"]
    client_id = (await auth_client.post("/clients/", json={"name": "Office", "hourly_rate": 20})).json()["id"]
    anna, bohdan, cyril = [
        (await auth_client.post("/workers/", json={"name": name})).json()["id"]
        for name in ("Anna", "Bohdan", "Cyril")
    ]
    await auth_client.post("/reports/", json={
        "client_id": client_id,
        "date": "2024-03-01",
        "work_days": [{"date": "2024-03-01", "hours": 1, "assignments": [{"worker_id": anna, "amount": 20}]}],
    })

    ordered = [w["id"] for w in (await auth_client.get("/workers/sorted")).json()]

    assert ordered == [primary_id, cyril, anna, bohdan]


async def test_deduplicate_endpoint(office):
    api, client_id, primary_id, helper_id = office
    twin_id = (await api.post("/workers/", json={"name": "LIDIA"})).json()["id"]
    await api.post("/reports/", json={
        "client_id": client_id,
        "date": "2024-03-01",
        "work_days": [
            {"date": "2024-03-01", "hours": 1, "assignments": [{"worker_id": twin_id, "amount": 20}]},
            {"date": "2024-03-02", "hours": 1, "assignments": [{"worker_id": twin_id, "amount": 20}]},
        ],
    })

    response = await api.post("/workers/deduplicate", json={"name": "lidia"})

    result = response.json()
    assert result["success"] is True
    assert result["survivor"]["id"] == twin_id
    assert result["merged_count"] == 1
    remaining = {w["id"] for w in (await api.get("/workers/")).json()}
    assert remaining == {primary_id, twin_id}


async def test_deduplicate_unknown_name(auth_client):
    response = await auth_client.post("/workers/deduplicate", json={"name": "Nobody"})

    assert response.status_code == 200
    assert response.json()["success"] is False


async def test_select_worker_filter(office):
    api, client_id, primary_id, helper_id = office
    await create_shared_report(api, client_id, primary_id, helper_id)

    selected = await api.put("/preferences/", json={"selected_worker_id": helper_id})
    assert selected.json()["selected_worker_id"] == helper_id

    reports = (await api.get("/reports/")).json()
    assert reports[0]["total_earned"] == pytest.approx(40)

    await api.put("/preferences/", json={"selected_worker_id": None})
    assert (await api.get("/reports/")).json()[0]["total_earned"] == pytest.approx(100)


async def test_select_unknown_worker_is_not_found(auth_client):
    response = await auth_client.put("/preferences/", json={"selected_worker_id": 999})

    assert response.status_code == 404


async def test_deleting_selected_worker_resets_filter(office):
    api, _, _, helper_id = office
    await api.put("/preferences/", json={"selected_worker_id": helper_id})

    await api.delete(f"/workers/{helper_id}")

    assert (await api.get("/preferences/")).json()["selected_worker_id"] is None


def test_recent_workers_are_capped_and_deduplicated():
    context = AppContext()

    context.mark_used(1, list(range(RECENT_WORKERS_LIMIT)))
    context.mark_used(1, [5, 99, 5])

    recent = context.get(1).recent_worker_ids
    assert recent[:2] == [5, 99]
    assert len(recent) == RECENT_WORKERS_LIMIT
    assert recent.count(5) == 1


def test_preferences_survive_save_and_load(tmp_path):
    path = tmp_path / "preferences.json"
    context = AppContext(path=path)
    context.select_worker(7, 3)
    context.mark_added(7, 4)

    context.save()
    loaded = AppContext.load(path)

    assert loaded.get(7).selected_worker_id == 3
    assert loaded.get(7).last_added_worker_id == 4


def test_broken_preferences_file_starts_empty(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json", encoding="utf-8")

    assert AppContext.load(path).preferences == {}


def test_preferences_file_format(tmp_path):
    path = tmp_path / "preferences.json"
    context = AppContext(path=path)
    context.mark_used(2, [8])
    context.save()

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "2": {"selected_worker_id": None, "recent_worker_ids": [8], "last_added_worker_id": None}
    }
