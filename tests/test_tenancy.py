from datetime import date, timedelta

import pytest


def _member_id(client, gym_id, headers, add_member):
    return add_member(gym_id, headers, email="owner@example.com")["id"]


def _staff_id(client, gym_id, headers, add_member):
    response = client.post(
        f"/api/gym/{gym_id}/staff", json={"name": "Omar", "position": "Front desk", "hourlyRate": 12}, headers=headers
    )
    return response.json()["id"]


# collection path, create body builder, update body, status target (None when the collection has no lifecycle)
COLLECTIONS = [
    pytest.param("subscriptions", lambda *_: {"name": "Gold", "price": 50, "durationMonths": 1}, {"price": 1}, None,
                 id="subscriptions"),
    pytest.param("trainers", lambda *_: {"name": "Coach Nour"}, {"name": "Taken"}, None, id="trainers"),
    pytest.param("classes", lambda *_: {"name": "Box", "day": "Monday", "time": "20:00"}, {"name": "Taken"}, None,
                 id="classes"),
    pytest.param("lockers", lambda *_: {"number": "Z-1"}, {"number": "Z-9"}, "maintenance", id="lockers"),
    pytest.param(
        "reservations",
        lambda *args: {
            "facility": "Squash Court",
            "memberId": _member_id(*args),
            "date": str(date.today() + timedelta(days=1)),
            "startTime": "10:00",
            "endTime": "11:00",
        },
        {"facility": "Pool"},
        "cancelled",
        id="reservations",
    ),
    pytest.param("expenses", lambda *_: {"description": "Towels", "amount": 40, "category": "supplies"},
                 {"vendor": "Taken"}, None, id="expenses"),
    pytest.param("staff", lambda *_: {"name": "Lina", "position": "Trainer"}, {"name": "Taken"}, None, id="staff"),
    pytest.param(
        "payroll",
        lambda *args: {
            "staffId": _staff_id(*args),
            "payPeriodStart": "2024-03-01",
            "payPeriodEnd": "2024-03-31",
            "hoursWorked": 10,
        },
        {"hoursWorked": 99},
        "processed",
        id="payroll",
    ),
    pytest.param("products", lambda *_: {"name": "Protein Bar", "price": 2.5, "stock": 5}, {"price": 0.5}, None,
                 id="products"),
    pytest.param(
        "deposits",
        lambda *args: {"memberId": _member_id(*args), "amount": 100, "type": "locker"},
        {"amount": 1},
        "refunded",
        id="deposits",
    ),
]


@pytest.mark.parametrize("collection, build, update, target", COLLECTIONS)
class TestCollectionIsolation:
    def _foreign_record(self, client, ironhouse, add_member, collection, build):
        other_gym, other_headers = ironhouse
        body = build(client, other_gym["id"], other_headers, add_member)
        response = client.post(f"/api/gym/{other_gym['id']}/{collection}", json=body, headers=other_headers)
        assert response.status_code == 201, response.text
        return response.json()

    def test_foreign_record_under_own_path_is_not_found(
        self, client, fitzone, ironhouse, add_member, collection, build, update, target
    ):
        gym, headers = fitzone
        other_gym, other_headers = ironhouse
        record = self._foreign_record(client, ironhouse, add_member, collection, build)
        path = f"/api/gym/{gym['id']}/{collection}/{record['id']}"

        assert client.get(path, headers=headers).status_code == 404
        assert client.put(path, json=update, headers=headers).status_code == 404
        if target is not None:
            assert client.put(f"{path}/status", json={"status": target}, headers=headers).status_code == 404
        assert client.delete(path, headers=headers).status_code == 404
        assert client.get(f"/api/gym/{gym['id']}/{collection}", headers=headers).json() == []

        untouched = client.get(f"/api/gym/{other_gym['id']}/{collection}/{record['id']}", headers=other_headers)
        assert untouched.status_code == 200
        assert untouched.json() == record

    def test_foreign_gym_path_is_forbidden(
        self, client, fitzone, ironhouse, add_member, collection, build, update, target
    ):
        _, headers = fitzone
        other_gym, _ = ironhouse
        record = self._foreign_record(client, ironhouse, add_member, collection, build)
        base = f"/api/gym/{other_gym['id']}/{collection}"

        for response in (
            client.get(base, headers=headers),
            client.get(f"{base}/{record['id']}", headers=headers),
            client.put(f"{base}/{record['id']}", json=update, headers=headers),
            client.delete(f"{base}/{record['id']}", headers=headers),
        ):
            assert response.status_code == 403
            assert response.json() == {"error": "Access denied to this gym"}
