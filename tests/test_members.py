from datetime import date, timedelta

from gymcore.models import Member


def test_member_crud(client, fitzone):
    gym, headers = fitzone
    base = f"/api/gym/{gym['id']}/members"

    created = client.post(
        base,
        json={"name": "Sam Lifter", "email": "Sam@Example.com", "membershipType": "monthly", "totalPaid": 49.5},
        headers=headers,
    )
    assert created.status_code == 201
    member = created.json()
    assert member["status"] == "pending"
    assert member["email"] == "sam@example.com"
    assert member["gymId"] == gym["id"]
    assert member["joinDate"] == str(date.today())

    fetched = client.get(f"{base}/{member['id']}", headers=headers)
    assert fetched.json()["membershipType"] == "monthly"

    updated = client.put(f"{base}/{member['id']}", json={"phone": "+961 1 234 567"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["phone"] == "+961 1 234 567"
    assert updated.json()["name"] == "Sam Lifter"

    assert len(client.get(base, headers=headers).json()) == 1


def test_double_delete_returns_not_found(client, fitzone, add_member):
    gym, headers = fitzone
    member = add_member(gym["id"], headers)
    path = f"/api/gym/{gym['id']}/members/{member['id']}"

    first = client.delete(path, headers=headers)
    second = client.delete(path, headers=headers)

    assert first.status_code == 204
    assert second.status_code == 404
    assert second.json() == {"error": "Member not found"}
    assert client.get(f"/api/gym/{gym['id']}/members", headers=headers).json() == []


def test_duplicate_member_email_within_gym_conflicts(client, fitzone, ironhouse, add_member):
    gym, headers = fitzone
    add_member(gym["id"], headers, email="dup@example.com")
    response = client.post(
        f"/api/gym/{gym['id']}/members",
        json={"name": "Dup", "email": "dup@example.com"},
        headers=headers,
    )
    assert response.status_code == 409

    other_gym, other_headers = ironhouse
    add_member(other_gym["id"], other_headers, email="dup@example.com")


def test_approve_and_reject(client, fitzone, add_member):
    gym, headers = fitzone
    base = f"/api/gym/{gym['id']}/members"
    approved = add_member(gym["id"], headers, email="ok@example.com")
    assert approved["status"] == "active"

    pending = add_member(gym["id"], headers, email="no@example.com", approve=False)
    rejected = client.post(f"{base}/{pending['id']}/reject", headers=headers)
    assert rejected.json()["status"] == "inactive"

    pending_only = client.get(base, params={"status": "pending"}, headers=headers)
    assert pending_only.json() == []


def test_illegal_member_transition_is_400(client, fitzone, add_member):
    gym, headers = fitzone
    member = add_member(gym["id"], headers, approve=False)
    base = f"/api/gym/{gym['id']}/members/{member['id']}"

    response = client.put(f"{base}/status", json={"status": "expired"}, headers=headers)
    assert response.status_code == 400
    assert "pending" in response.json()["error"]

    unknown = client.put(f"{base}/status", json={"status": "vip"}, headers=headers)
    assert unknown.status_code == 400


def test_member_expiry_is_applied_on_read(client, fitzone, db_session):
    gym, headers = fitzone
    db_session.add(
        Member(
            gym_id=gym["id"],
            name="Lapsed",
            email="lapsed@example.com",
            status="active",
            expiry_date=date.today() - timedelta(days=1),
        )
    )
    db_session.commit()

    listing = client.get(f"/api/gym/{gym['id']}/members", headers=headers)
    assert listing.json()[0]["status"] == "expired"

    renewed = client.put(
        f"/api/gym/{gym['id']}/members/{listing.json()[0]['id']}",
        json={"expiryDate": str(date.today() + timedelta(days=30))},
        headers=headers,
    )
    assert renewed.json()["status"] == "active"


def test_member_search(client, fitzone, add_member):
    gym, headers = fitzone
    add_member(gym["id"], headers, email="alice@example.com", name="Alice Stone")
    add_member(gym["id"], headers, email="bob@example.com", name="Bob Marsh")

    found = client.get(f"/api/gym/{gym['id']}/members", params={"search": "marsh"}, headers=headers)
    assert [m["name"] for m in found.json()] == ["Bob Marsh"]


class TestTenantIsolation:
    def test_gym_admin_cannot_use_another_gyms_path(self, client, fitzone, ironhouse):
        _, fitzone_headers = fitzone
        other_gym, _ = ironhouse
        for method in ("get", "post"):
            response = getattr(client, method)(
                f"/api/gym/{other_gym['id']}/members",
                headers=fitzone_headers,
                **({"json": {"name": "X", "email": "x@example.com"}} if method == "post" else {}),
            )
            assert response.status_code == 403
            assert response.json() == {"error": "Access denied to this gym"}

    def test_foreign_record_under_own_path_is_not_found(self, client, fitzone, ironhouse, add_member):
        gym, headers = fitzone
        other_gym, other_headers = ironhouse
        foreign = add_member(other_gym["id"], other_headers, email="foreign@example.com")
        path = f"/api/gym/{gym['id']}/members/{foreign['id']}"

        assert client.get(path, headers=headers).status_code == 404
        assert client.put(path, json={"name": "Hijacked"}, headers=headers).status_code == 404
        assert client.delete(path, headers=headers).status_code == 404
        assert client.post(f"{path}/approve", headers=headers).status_code == 404

        untouched = client.get(f"/api/gym/{other_gym['id']}/members/{foreign['id']}", headers=other_headers)
        assert untouched.json()["name"] == "Jane Runner"

    def test_gym_id_in_body_is_ignored(self, client, fitzone, ironhouse):
        gym, headers = fitzone
        other_gym, other_headers = ironhouse
        response = client.post(
            f"/api/gym/{gym['id']}/members",
            json={"name": "Sneaky", "email": "sneaky@example.com", "gymId": other_gym["id"]},
            headers=headers,
        )
        assert response.json()["gymId"] == gym["id"]
        assert client.get(f"/api/gym/{other_gym['id']}/members", headers=other_headers).json() == []

    def test_listing_only_returns_own_members(self, client, fitzone, ironhouse, add_member):
        gym, headers = fitzone
        other_gym, other_headers = ironhouse
        add_member(gym["id"], headers, email="mine@example.com")
        add_member(other_gym["id"], other_headers, email="theirs@example.com")

        mine = client.get(f"/api/gym/{gym['id']}/members", headers=headers).json()
        assert [m["email"] for m in mine] == ["mine@example.com"]

    def test_operator_may_manage_any_gym(self, client, operator_headers, fitzone, add_member):
        gym, headers = fitzone
        add_member(gym["id"], headers)
        response = client.get(f"/api/gym/{gym['id']}/members", headers=operator_headers)
        assert response.status_code == 200
        assert len(response.json()) == 1

        assert client.get("/api/gym/999/members", headers=operator_headers).status_code == 404
