from bson import ObjectId


async def test_developer_directory_filters(client, signup_developer):
    await signup_developer(first_name="Ava", skills=["python", "django"], city="Tehran")
    await signup_developer(first_name="Bob", skills=["go"], city="Isfahan")
    await signup_developer(first_name="Cyrus", skills=["python"], city="Tehran", is_available=False)

    everyone = (await client.get("/api/developers")).json()
    assert everyone["pagination"]["total"] == 2

    python = (await client.get("/api/developers", params={"skills": "python, rust"})).json()
    assert [d["first_name"] for d in python["data"]] == ["Ava"]
    assert "password_hash" not in python["data"][0]

    unavailable = (await client.get("/api/developers", params={"is_available": "false"})).json()
    assert [d["first_name"] for d in unavailable["data"]] == ["Cyrus"]

    paged = (await client.get("/api/developers", params={"limit": 1, "page": 2})).json()
    assert paged["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}
    assert len(paged["data"]) == 1


async def test_pagination_limits(client):
    assert (await client.get("/api/developers", params={"limit": 101})).status_code == 400
    assert (await client.get("/api/developers", params={"page": 0})).status_code == 400


async def test_complete_profile_raises_completion(client, signup_developer):
    _, headers = await signup_developer()
    before = (await client.get("/api/developers/profile", headers=headers)).json()["data"]

    response = await client.post(
        "/api/developers/profile/complete",
        json={
            "phone": "0912",
            "city": "Tehran",
            "skills": ["python", " python ", "go"],
            "experience_years": 0,
            "github_url": "https://github.com/sara",
        },
        headers=headers,
    )
    assert response.status_code == 200
    after = response.json()["data"]
    assert after["skills"] == ["python", "go"]
    assert after["profile_completion"] > before["profile_completion"]
    assert after["profile_completion"] == 73
    assert after["is_profile_complete"] is False


async def test_profile_rejects_bad_urls_and_unknown_fields(client, signup_developer):
    _, headers = await signup_developer()
    bad_url = await client.put("/api/developers/profile", json={"github_url": "github.com/x"}, headers=headers)
    assert bad_url.status_code == 400

    extra = await client.put("/api/developers/profile", json={"role": "Admin"}, headers=headers)
    assert extra.status_code == 400


async def test_availability_toggle(client, signup_developer):
    _, headers = await signup_developer()
    response = await client.patch(
        "/api/developers/profile/availability", json={"is_available": False}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["data"] == {"is_available": False}


async def test_public_profile_hides_private_projects(client, signup_developer):
    user, headers = await signup_developer()
    for title, public in (("Open Thing", True), ("Closed Thing", False)):
        await client.post(
            "/api/projects",
            json={"title": title, "description": "A project description.", "tech_stack": ["go"], "is_public": public},
            headers=headers,
        )

    public = (await client.get(f"/api/developers/{user['id']}")).json()["data"]
    assert [p["title"] for p in public["projects"]] == ["Open Thing"]
    assert "password_hash" not in public

    own = (await client.get("/api/developers/profile", headers=headers)).json()["data"]
    assert [p["title"] for p in own["projects"]] == ["Open Thing", "Closed Thing"]


async def test_developer_by_id_errors(client):
    assert (await client.get("/api/developers/nope")).status_code == 404
    assert (await client.get(f"/api/developers/{ObjectId()}")).status_code == 404


async def test_update_by_id_requires_self_or_admin(client, signup_developer, make_admin):
    target, target_headers = await signup_developer()
    _, other_headers = await signup_developer()
    admin, admin_headers = await signup_developer()
    await make_admin(admin)
    url = f"/api/developers/{target['id']}"

    assert (await client.put(url, json={"city": "Rasht"}, headers=other_headers)).status_code == 403
    assert (await client.put(url, json={"city": "Rasht"}, headers=target_headers)).status_code == 200

    response = await client.put(url, json={"city": "Tabriz"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["city"] == "Tabriz"


async def test_delete_developer_is_admin_only(client, db, signup_developer, make_admin):
    target, target_headers = await signup_developer()
    admin, admin_headers = await signup_developer()
    url = f"/api/developers/{target['id']}"

    assert (await client.delete(url, headers=target_headers)).status_code == 403

    await make_admin(admin)
    assert (await client.delete(url, headers=admin_headers)).status_code == 200
    assert await db.developers.find_one({"_id": ObjectId(target["id"])}) is None


async def test_admin_promotion_applies_to_existing_token(client, signup_developer, make_admin):
    admin, headers = await signup_developer()
    before = await client.get("/api/auth/me", headers=headers)
    assert before.json()["data"]["user"]["role"] == "Developer"

    await make_admin(admin)
    after = await client.get("/api/auth/me", headers=headers)
    assert after.json()["data"]["user"]["role"] == "Admin"


async def test_employer_profile(client, signup_employer):
    employer, headers = await signup_employer(website="https://acme.io")

    own = (await client.get("/api/employers/profile", headers=headers)).json()["data"]
    assert own["profile_completion"] == 50
    assert "password_hash" not in own

    updated = await client.put(
        "/api/employers/profile",
        json={"industry": "Fintech", "company_size": "11-50"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["profile_completion"] == 70

    bad_size = await client.put("/api/employers/profile", json={"company_size": "9000"}, headers=headers)
    assert bad_size.status_code == 400

    public = (await client.get(f"/api/employers/{employer['id']}")).json()["data"]
    assert public["industry"] == "Fintech"


async def test_employer_directory(client, signup_employer):
    await signup_employer(company_name="Acme Labs", industry="Software", city="Tehran")
    await signup_employer(company_name="Bazaar Co", industry="Retail", city="Mashhad", company_size="500+")

    software = (await client.get("/api/employers", params={"industry": "soft"})).json()
    assert [e["company_name"] for e in software["data"]] == ["Acme Labs"]

    large = (await client.get("/api/employers", params={"company_size": "500+"})).json()
    assert [e["company_name"] for e in large["data"]] == ["Bazaar Co"]


async def test_profile_routes_check_kind(client, signup_developer, signup_employer):
    _, developer_headers = await signup_developer()
    _, employer_headers = await signup_employer()
    assert (await client.get("/api/developers/profile", headers=employer_headers)).status_code == 403
    assert (await client.get("/api/employers/profile", headers=developer_headers)).status_code == 403
