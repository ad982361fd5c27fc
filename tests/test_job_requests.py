import asyncio

from bson import ObjectId

from hamkar.db.base import ensure_indexes
from hamkar.services import job_request_service


async def test_create_job_request(client, signup_developer, signup_employer, send_request):
    developer, _ = await signup_developer()
    employer, employer_headers = await signup_employer()

    response = await send_request(employer_headers, developer["id"], salary_type="monthly")
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["salary_type"] == "monthly"
    assert data["employer_id"] == employer["id"]
    assert data["developer"]["full_name"] == "Sara Ahmadi"
    assert data["employer"]["company_name"] == "Acme Labs"


async def test_only_employers_send_requests(signup_developer, send_request):
    developer, developer_headers = await signup_developer()
    response = await send_request(developer_headers, developer["id"])
    assert response.status_code == 403


async def test_one_pending_request_per_pair(db, signup_developer, signup_employer, send_request):
    developer, _ = await signup_developer()
    _, employer_headers = await signup_employer()

    assert (await send_request(employer_headers, developer["id"])).status_code == 201
    duplicate = await send_request(employer_headers, developer["id"], job_title="Another role")
    assert duplicate.status_code == 409
    assert await db.job_requests.count_documents({"developer_id": ObjectId(developer["id"])}) == 1


async def test_concurrent_requests_leave_one_pending(db, signup_developer, signup_employer, send_request):
    await ensure_indexes(db)
    developer, _ = await signup_developer()
    _, employer_headers = await signup_employer()

    responses = await asyncio.gather(
        send_request(employer_headers, developer["id"]),
        send_request(employer_headers, developer["id"]),
    )
    assert sorted(r.status_code for r in responses) == [201, 409]
    assert await db.job_requests.count_documents({"status": "pending"}) == 1


async def test_duplicate_key_on_insert_is_a_conflict(db, monkeypatch, signup_developer, signup_employer, send_request):
    await ensure_indexes(db)
    developer, _ = await signup_developer()
    _, employer_headers = await signup_employer()
    assert (await send_request(employer_headers, developer["id"])).status_code == 201

    async def nothing_pending(db, pair):
        return None

    # The other create wins between the pending check and the insert
    monkeypatch.setattr(job_request_service, "find_pending", nothing_pending)
    response = await send_request(employer_headers, developer["id"], job_title="Another role")
    assert response.status_code == 409
    assert response.json()["message"] == job_request_service.DUPLICATE_PENDING
    assert await db.job_requests.count_documents({"status": "pending"}) == 1


async def test_unavailable_developer(db,signup_developer, signup_employer, send_request):
    developer, _ = await signup_developer(is_available=False)
    _, employer_headers = await signup_employer()

    response = await send_request(employer_headers, developer["id"])
    assert response.status_code == 400
    assert response.json()["message"] == "Developer is not available for work"
    assert await db.job_requests.count_documents({}) == 0


async def test_unknown_developer(signup_employer, send_request):
    _, employer_headers = await signup_employer()
    response = await send_request(employer_headers, str(ObjectId()))
    assert response.status_code == 404
    assert response.json()["message"] == "Developer not found"


async def test_accept_then_reject_keeps_accepted(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]

    accepted = await client.patch(
        f"/api/job-requests/{request_id}/accept", json={"notes": "Happy to talk"}, headers=developer_headers
    )
    assert accepted.status_code == 200
    assert accepted.json()["data"]["status"] == "accepted"
    assert accepted.json()["data"]["developer_notes"] == "Happy to talk"

    rejected = await client.patch(f"/api/job-requests/{request_id}/reject", headers=developer_headers)
    assert rejected.status_code == 400

    current = await client.get(f"/api/job-requests/{request_id}", headers=developer_headers)
    assert current.json()["data"]["status"] == "accepted"
    assert current.json()["data"]["developer_notes"] == "Happy to talk"


async def test_decision_accepts_side_specific_notes(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    first = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]

    wrong_side = await client.patch(
        f"/api/job-requests/{first}/reject", json={"employer_notes": "x"}, headers=developer_headers
    )
    assert wrong_side.status_code == 400
    assert wrong_side.json()["errors"] == ["employer_notes"]

    rejected = await client.patch(
        f"/api/job-requests/{first}/reject", json={"developer_notes": "Not a fit"}, headers=developer_headers
    )
    assert rejected.status_code == 200
    assert rejected.json()["data"]["developer_notes"] == "Not a fit"

    second = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]
    withdrawn = await client.patch(
        f"/api/job-requests/{second}/withdraw", json={"employer_notes": "Role filled"}, headers=employer_headers
    )
    assert withdrawn.status_code == 200
    assert withdrawn.json()["data"]["employer_notes"] == "Role filled"


async def test_only_the_addressed_developer_decides(client, signup_developer, signup_employer, send_request):
    developer, _ = await signup_developer()
    _, stranger_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]

    response = await client.patch(f"/api/job-requests/{request_id}/accept", headers=stranger_headers)
    assert response.status_code == 403

    response = await client.patch(f"/api/job-requests/{request_id}/accept", headers=employer_headers)
    assert response.status_code == 403


async def test_withdraw_allows_a_new_request(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]

    withdrawn = await client.patch(f"/api/job-requests/{request_id}/withdraw", headers=employer_headers)
    assert withdrawn.status_code == 200
    assert withdrawn.json()["data"]["status"] == "withdrawn"

    too_late = await client.patch(f"/api/job-requests/{request_id}/accept", headers=developer_headers)
    assert too_late.status_code == 400

    assert (await send_request(employer_headers, developer["id"])).status_code == 201


async def test_update_rejects_fields_outside_callers_side(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]
    url = f"/api/job-requests/{request_id}"

    response = await client.put(url, json={"interview_location": "Office", "developer_notes": "ok"}, headers=developer_headers)
    assert response.status_code == 400
    assert response.json()["errors"] == ["interview_location"]

    response = await client.put(url, json={"developer_notes": "Looking forward"}, headers=employer_headers)
    assert response.status_code == 400

    response = await client.put(
        url,
        json={"interview_location": "Tehran office", "interview_date": "2030-05-01T10:00:00", "employer_notes": "Round 1"},
        headers=employer_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["interview_location"] == "Tehran office"
    assert data["status"] == "pending"


async def test_update_status_follows_transition_rules(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]
    url = f"/api/job-requests/{request_id}"

    assert (await client.put(url, json={"status": "accepted"}, headers=employer_headers)).status_code == 400
    assert (await client.put(url, json={"status": "withdrawn"}, headers=developer_headers)).status_code == 400

    response = await client.put(url, json={"status": "rejected", "developer_notes": "Not now"}, headers=developer_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"

    assert (await client.put(url, json={"status": "accepted"}, headers=developer_headers)).status_code == 400


async def test_list_is_scoped_to_caller(client, signup_developer, signup_employer, send_request):
    developer, developer_headers = await signup_developer()
    other_developer, other_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    await send_request(employer_headers, developer["id"])
    await send_request(employer_headers, other_developer["id"])

    mine = await client.get("/api/job-requests", headers=developer_headers)
    assert mine.json()["pagination"]["total"] == 1
    assert mine.json()["data"][0]["developer_id"] == developer["id"]

    sent = await client.get("/api/job-requests", headers=employer_headers)
    assert sent.json()["pagination"]["total"] == 2

    accepted_only = await client.get("/api/job-requests", params={"status": "accepted"}, headers=employer_headers)
    assert accepted_only.json()["pagination"]["total"] == 0

    bad_status = await client.get("/api/job-requests", params={"status": "archived"}, headers=employer_headers)
    assert bad_status.status_code == 400


async def test_get_is_limited_to_parties_and_admin(
    client, signup_developer, signup_employer, make_admin, send_request
):
    developer, _ = await signup_developer()
    _, employer_headers = await signup_employer()
    _, outsider_headers = await signup_employer()
    admin, admin_headers = await signup_developer()
    await make_admin(admin)
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]
    url = f"/api/job-requests/{request_id}"

    assert (await client.get(url, headers=outsider_headers)).status_code == 403
    assert (await client.get(url, headers=employer_headers)).status_code == 200
    assert (await client.get(url, headers=admin_headers)).status_code == 200


async def test_delete_is_admin_only(client, db, signup_developer, signup_employer, make_admin, send_request):
    developer, _ = await signup_developer()
    employer, employer_headers = await signup_employer()
    request_id = (await send_request(employer_headers, developer["id"])).json()["data"]["id"]
    url = f"/api/job-requests/{request_id}"

    assert (await client.delete(url, headers=employer_headers)).status_code == 403

    await make_admin(employer)
    assert (await client.delete(url, headers=employer_headers)).status_code == 200
    assert await db.job_requests.count_documents({}) == 0
    assert (await client.get(url, headers=employer_headers)).status_code == 404
