from datetime import date

import pytest

from components.dashboard.repository import period_start
from conftest import create_shared_report


@pytest.mark.parametrize(
    "period, expected",
    [("month", date(2024, 3, 1)), ("year", date(2024, 1, 1)), ("all", None)],
)
def test_period_start(period, expected):
    assert period_start(period, date(2024, 3, 15)) == expected


@pytest.fixture
async def two_clients(office):
    """The shared office report plus a fully paid flat report in April."""
    api, office_id, primary_id, helper_id = office
    await create_shared_report(api, office_id, primary_id, helper_id)
    flat_id = (await api.post("/clients/", json={"name": "Flat", "hourly_rate": 30})).json()["id"]
    await api.post("/reports/", json={
        "client_id": flat_id,
        "date": "2024-04-02",
        "work_days": [{"date": "2024-04-02", "hours": 5, "payment_status": "paid"}],
    })
    return api, office_id, flat_id, primary_id, helper_id


async def test_summary_for_all_time(two_clients):
    api, office_id, flat_id, _, _ = two_clients

    summary = (await api.get("/dashboard/summary", params={"period": "all"})).json()

    assert summary["period_start"] is None
    assert summary["total_earned"] == pytest.approx(250)
    assert summary["total_paid"] == pytest.approx(200)
    assert summary["total_remaining"] == pytest.approx(50)
    assert summary["total_hours"] == pytest.approx(10)
    assert [row["client_id"] for row in summary["client_leaderboard"]] == [flat_id, office_id]
    assert [(row["client_id"], row["remaining"]) for row in summary["debts"]] == [(office_id, pytest.approx(50))]


async def test_summary_for_one_month(two_clients):
    api, office_id, _, _, _ = two_clients

    summary = (await api.get("/dashboard/summary", params={"period": "month", "reference": "2024-03-20"})).json()

    assert summary["period_start"] == "2024-03-01"
    assert summary["total_earned"] == pytest.approx(100)
    assert [row["client_id"] for row in summary["client_leaderboard"]] == [office_id]


async def test_summary_for_empty_period(two_clients):
    api, _, _, _, _ = two_clients

    summary = (await api.get("/dashboard/summary", params={"period": "year", "reference": "2020-06-01"})).json()

    assert summary["total_earned"] == 0
    assert summary["client_leaderboard"] == []
    assert summary["debts"] == []


async def test_summary_for_one_client_and_worker(two_clients):
    api, office_id, _, _, helper_id = two_clients

    summary = (await api.get(
        "/dashboard/summary", params={"period": "all", "client_id": office_id, "worker_id": helper_id}
    )).json()

    assert summary["total_earned"] == pytest.approx(40)
    assert summary["total_paid"] == pytest.approx(20)
    assert summary["total_hours"] == pytest.approx(2)


async def test_bad_period_is_rejected(auth_client):
    response = await auth_client.get("/dashboard/summary", params={"period": "week"})

    assert response.status_code == 422


async def test_worker_debts(two_clients):
    api, office_id, _, _, helper_id = two_clients

    debts = (await api.get(f"/dashboard/worker-debts/{helper_id}")).json()

    assert debts["total_unpaid_amount"] == pytest.approx(20)
    assert debts["total_unpaid_hours"] == pytest.approx(1)
    assert [client["client_id"] for client in debts["clients"]] == [office_id]
    assert debts["clients"][0]["work_days"][0]["date"] == "2024-03-01"


async def test_worker_debts_for_unknown_worker(auth_client):
    response = await auth_client.get("/dashboard/worker-debts/999")

    assert response.status_code == 404
