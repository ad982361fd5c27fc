import os
import tempfile
import uuid

# Settings are read at import time
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MONGODB_USE_TRANSACTIONS"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="hamkar-uploads-")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from bson import ObjectId  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

from hamkar.db.session import get_db  # noqa: E402
from hamkar.main import app  # noqa: E402

PASSWORD = "secret123"


def unique_email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@mail.hamkar.io"


def auth(token: str):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db():
    return AsyncMongoMockClient()["hamkar_test"]


@pytest.fixture
async def client(db):
    app.state.limiter.enabled = False
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def signup_developer(client, db):
    """Create a developer; returns (user, headers). Extra kwargs are set on the profile."""

    async def _signup(**profile):
        email = profile.pop("email", None) or unique_email("dev")
        response = await client.post(
            "/api/auth/developer/signup",
            json={
                "first_name": profile.pop("first_name", "Sara"),
                "last_name": profile.pop("last_name", "Ahmadi"),
                "email": email,
                "password": PASSWORD,
            },
        )
        assert response.status_code == 201, response.text
        # Tests pass credentials explicitly
        client.cookies.clear()
        data = response.json()["data"]
        if profile:
            await db.developers.update_one({"_id": ObjectId(data["user"]["id"])}, {"$set": profile})
        return data["user"], auth(data["token"])

    return _signup


@pytest.fixture
def signup_employer(client):
    async def _signup(**fields):
        payload = {
            "company_name": "Acme Labs",
            "email": unique_email("hr"),
            "password": PASSWORD,
            "phone": "+98 21 5555 0000",
            "city": "Tehran",
        }
        payload.update(fields)
        response = await client.post("/api/auth/employer/signup", json=payload)
        assert response.status_code == 201, response.text
        client.cookies.clear()
        data = response.json()["data"]
        return data["user"], auth(data["token"])

    return _signup


@pytest.fixture
def make_admin(db):
    async def _promote(user):
        collection = db.developers if user["user_type"] == "Developer" else db.employers
        await collection.update_one({"_id": ObjectId(user["id"])}, {"$set": {"role": "Admin"}})

    return _promote


@pytest.fixture
def send_request(client):
    async def _send(employer_headers, developer_id, **fields):
        payload = {"developer_id": developer_id, "job_title": "Backend Engineer", "salary_offer": 85000}
        payload.update(fields)
        return await client.post("/api/job-requests", json=payload, headers=employer_headers)

    return _send
