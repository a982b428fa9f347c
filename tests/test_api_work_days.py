import pytest

from conftest import create_shared_report


@pytest.fixture
async def shared_day(office):
    api, client_id, primary_id, helper_id = office
    report = await create_shared_report(api, client_id, primary_id, helper_id)
    return api, report["id"], report["work_days"][0]["id"], primary_id, helper_id


async def test_get_work_day(shared_day):
    api, _, day_id, _, _ = shared_day

    response = await api.get(f"/work-days/{day_id}")

    assert response.status_code == 200
    assert response.json()["payment_status"] == "partial"
    assert (await api.get("/work-days/999")).status_code == 404


async def test_partial_payment_reaching_total_marks_paid(shared_day):
    api, report_id, day_id, _, _ = shared_day

    response = await api.post(f"/work-days/{day_id}/partial-payment", json={"amount": 50})

    assert response.json()["payment_status"] == "paid"
    assert response.json()["day_paid_amount"] == pytest.approx(100)
    report = (await api.get(f"/reports/{report_id}")).json()
    assert report["payment_status"] == "paid"
    assert report["remaining_amount"] == pytest.approx(0)


async def test_partial_payment_below_total_stays_partial(shared_day):
    api, _, day_id, _, _ = shared_day

    response = await api.post(f"/work-days/{day_id}/partial-payment", json={"amount": 20})

    assert response.json()["payment_status"] == "partial"
    assert response.json()["day_paid_amount"] == pytest.approx(70)


async def test_overpayment_is_rejected(shared_day):
    api, _, day_id, _, _ = shared_day

    response = await api.post(f"/work-days/{day_id}/partial-payment", json={"amount": 60})

    assert response.status_code == 422
    paid = (await api.get(f"/work-days/{day_id}/paid-amount")).json()
    assert paid["day_paid_amount"] == pytest.approx(50)


async def test_marking_unpaid_clears_paid_amount(shared_day):
    api, report_id, day_id, _, _ = shared_day

    response = await api.post(f"/work-days/{day_id}/payment-status", json={"payment_status": "unpaid"})

    assert response.json()["payment_status"] == "unpaid"
    assert response.json()["day_paid_amount"] == 0
    report = (await api.get(f"/reports/{report_id}")).json()
    assert report["paid_amount"] == 0
    assert report["payment_status"] == "unpaid"


async def test_marking_paid_keeps_recorded_amount(shared_day):
    api, report_id, day_id, _, _ = shared_day

    response = await api.post(f"/work-days/{day_id}/payment-status", json={"payment_status": "paid"})

    assert response.json()["day_paid_amount"] == pytest.approx(50)
    assert (await api.get(f"/reports/{report_id}")).json()["paid_amount"] == pytest.approx(100)


async def test_set_paid_amount(shared_day):
    api, _, day_id, _, _ = shared_day

    ok = await api.put(f"/work-days/{day_id}/paid-amount", json={"day_paid_amount": 80})
    too_much = await api.put(f"/work-days/{day_id}/paid-amount", json={"day_paid_amount": 150})

    assert ok.json()["day_paid_amount"] == pytest.approx(80)
    assert too_much.status_code == 422


async def test_changing_hours_rescales_assignments(shared_day):
    api, report_id, day_id, primary_id, helper_id = shared_day

    response = await api.put(f"/work-days/{day_id}", json={"hours": 10, "note": "deep clean"})

    day = response.json()
    assert day["amount"] == pytest.approx(200)
    assert day["note"] == "deep clean"
    amounts = {a["worker_id"]: a["amount"] for a in day["assignments"]}
    assert amounts == {primary_id: pytest.approx(120), helper_id: pytest.approx(80)}
    assert (await api.get(f"/reports/{report_id}")).json()["total_earned"] == pytest.approx(200)


async def test_replace_assignments(shared_day):
    api, _, day_id, primary_id, helper_id = shared_day

    response = await api.put(
        f"/work-days/{day_id}/assignments",
        json={"assignments": [{"worker_id": helper_id, "amount": 100}]},
    )

    assert response.status_code == 200
    assert [(a["worker_id"], a["hours"]) for a in response.json()["assignments"]] == [
        (helper_id, pytest.approx(5))
    ]


async def test_assignment_to_unknown_worker_is_rejected(shared_day):
    api, _, day_id, _, _ = shared_day

    response = await api.put(
        f"/work-days/{day_id}/assignments", json={"assignments": [{"worker_id": 999, "amount": 100}]}
    )

    assert response.status_code == 422


async def test_duplicate_worker_in_split_is_rejected(shared_day):
    api, _, day_id, primary_id, _ = shared_day

    response = await api.put(
        f"/work-days/{day_id}/assignments",
        json={"assignments": [{"worker_id": primary_id, "amount": 50}, {"worker_id": primary_id, "amount": 50}]},
    )

    assert response.status_code == 422


async def test_delete_work_day_refreshes_report(shared_day):
    api, report_id, day_id, _, _ = shared_day

    assert (await api.delete(f"/work-days/{day_id}")).status_code == 200

    report = (await api.get(f"/reports/{report_id}")).json()
    assert report["work_days"] == []
    assert report["total_earned"] == 0


async def test_picked_time_is_snapped_to_ten_minutes(shared_day):
    api, report_id, _, _, _ = shared_day

    response = await api.post(f"/reports/{report_id}/work-days", json={"date": "2024-03-02", "hours": "1:14"})

    assert response.status_code == 201
    day = next(d for d in response.json()["work_days"] if d["date"] == "2024-03-02")
    assert day["hours"] == pytest.approx(1 + 10 / 60)
    assert day["hours_display"] == "1:10"
    assert day["amount"] == pytest.approx(23.33)


async def test_update_accepts_picked_time(shared_day):
    api, _, day_id, _, _ = shared_day

    response = await api.put(f"/work-days/{day_id}", json={"hours": "2:30"})

    day = response.json()
    assert day["hours"] == pytest.approx(2.5)
    assert day["hours_display"] == "2:30"
    assert day["amount"] == pytest.approx(50)
