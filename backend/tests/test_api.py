"""
HTTP API tests

Runs the FastAPI app in-process against the in-memory database and a
temporary storage directory.
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from careerhub.database import get_db
from careerhub.main import app
from careerhub.services.storage import get_storage
from careerhub.timeutils import utcnow
from factories import make_community, make_counselor, make_job_form


@pytest_asyncio.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


async def login(client, email="admin@example.com", password="admin123", **extra):
    response = await client.post(
        "/auth/login", json={"email": email, "password": password, **extra}
    )
    assert response.status_code == 200, response.text
    return response


def job_payload(**overrides) -> dict:
    overrides.setdefault("expiry_date", utcnow() + timedelta(days=30))
    return make_job_form(**overrides).model_dump(mode="json")


async def create_job(client, **overrides) -> dict:
    response = await client.post("/jobs", json=job_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_admin_login_sets_session_cookie(self, client):
        response = await login(client)

        body = response.json()
        assert body["success"] is True
        assert body["user"]["role"] == "admin"
        assert "password" not in body["user"]
        assert "session_token" in response.cookies

        me = await client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "admin@example.com"

    @pytest.mark.asyncio
    async def test_remember_me_controls_cookie_lifetime(self, client):
        session_only = await login(client)
        remembered = await login(client, remember_me=True)

        assert "max-age" not in session_only.headers["set-cookie"].lower()
        assert "max-age=2592000" in remembered.headers["set-cookie"].lower()

    @pytest.mark.asyncio
    async def test_bad_credentials(self, client):
        response = await client.post(
            "/auth/login", json={"email": "admin@example.com", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_logout(self, client):
        await login(client)

        response = await client.post("/auth/logout")

        assert response.status_code == 200
        assert (await client.get("/auth/me")).status_code == 401


class TestJobRoutes:
    @pytest.mark.asyncio
    async def test_requires_login(self, client):
        assert (await client.get("/jobs")).status_code == 401

    @pytest.mark.asyncio
    async def test_create_read_and_list(self, client):
        await login(client)
        job = await create_job(client)

        assert job["applications"] == 0
        assert job["is_popular"] is False
        assert job["highlights"]["qualifications"] == ["5+ years of Python"]

        fetched = await client.get(f"/jobs/{job['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Senior Python Developer"

        listing = await client.get("/jobs", params={"is_active": "true"})
        assert [j["id"] for j in listing.json()["jobs"]] == [job["id"]]

    @pytest.mark.asyncio
    async def test_counselor_cannot_create_jobs(self, client, counselor_service):
        await counselor_service.create_counselor(make_counselor())
        await login(client, "dana@example.com", "secret123")

        response = await client.post("/jobs", json=job_payload())

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_form_is_422(self, client):
        await login(client)

        payload = job_payload() | {"salary_min": 100000, "salary_max": 1}

        response = await client.post("/jobs", json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_job_is_404(self, client):
        await login(client)

        assert (await client.get("/jobs/missing")).status_code == 404
        assert (await client.post("/jobs/missing/apply")).status_code == 404
        assert (await client.patch("/jobs/missing", json={"title": "Whatever"})).status_code == 404

    @pytest.mark.asyncio
    async def test_patch(self, client):
        await login(client)
        job = await create_job(client)

        zero = await client.patch(f"/jobs/{job['id']}", json={"salary_min": 0})
        inverted = await client.patch(f"/jobs/{job['id']}", json={"salary_min": 999999})
        null_title = await client.patch(f"/jobs/{job['id']}", json={"title": None})

        assert zero.status_code == 200
        assert zero.json()["salary_min"] == 0
        assert inverted.status_code == 400
        assert null_title.status_code == 422

    @pytest.mark.asyncio
    async def test_conflicting_status_filters(self, client):
        await login(client)

        response = await client.get("/jobs", params={"is_active": "true", "is_expired": "true"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_bad_cursor_is_400(self, client):
        await login(client)

        assert (await client.get("/jobs", params={"cursor": "garbage"})).status_code == 400

    @pytest.mark.asyncio
    async def test_pagination_over_http(self, client):
        await login(client)
        for i in range(3):
            await create_job(client, title=f"Job number {i}")

        first = (await client.get("/jobs", params={"page_size": 2})).json()
        second = (await client.get("/jobs", params={"page_size": 2, "cursor": first["cursor"]})).json()

        ids = [j["id"] for j in first["jobs"] + second["jobs"]]
        assert len(set(ids)) == 3
        assert first["has_more"] is True
        assert second["has_more"] is False

    @pytest.mark.asyncio
    async def test_apply_and_delete(self, client):
        await login(client)
        job = await create_job(client)

        applied = await client.post(f"/jobs/{job['id']}/apply")
        assert applied.json() == {"success": True}
        assert (await client.get(f"/jobs/{job['id']}")).json()["popularity"] == 10

        assert (await client.delete(f"/jobs/{job['id']}")).status_code == 204
        assert (await client.delete(f"/jobs/{job['id']}")).status_code == 204
        assert (await client.get(f"/jobs/{job['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_logo_upload(self, client, storage):
        await login(client)
        job = await create_job(client)

        response = await client.post(
            f"/jobs/{job['id']}/logo",
            files={"file": ("acme.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 200
        assert response.json()["employer_logo"] == (
            f"http://testserver/files/job-logos/{job['id']}/acme.png"
        )


class TestCounselorRoutes:
    @pytest.mark.asyncio
    async def test_admin_manages_counselors(self, client):
        await login(client)

        created = await client.post("/counselors", json=make_counselor().model_dump(mode="json"))
        assert created.status_code == 201
        counselor = created.json()
        assert "password" not in counselor

        verified = await client.put(
            f"/counselors/{counselor['id']}/verification", json={"is_verified": True}
        )
        assert verified.json()["is_verified"] is True

        status = await client.put(f"/counselors/{counselor['id']}/status", json={"status": "inactive"})
        assert status.json()["status"] == "inactive"

        listing = await client.get("/counselors", params={"status": "inactive"})
        assert [c["id"] for c in listing.json()["counselors"]] == [counselor["id"]]

        assert (await client.delete(f"/counselors/{counselor['id']}")).status_code == 204
        assert (await client.delete(f"/counselors/{counselor['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_counselor_sees_own_profile(self, client, counselor_service):
        created = await counselor_service.create_counselor(make_counselor())
        await login(client, "dana@example.com", "secret123")

        response = await client.get("/counselors/me")

        assert response.status_code == 200
        assert response.json()["id"] == created.id

    @pytest.mark.asyncio
    async def test_admin_has_no_counselor_profile(self, client):
        await login(client)
        assert (await client.get("/counselors/me")).status_code == 403


class TestDashboardRoutes:
    @pytest.mark.asyncio
    async def test_stats(self, client, counselor_service):
        await counselor_service.create_counselor(make_counselor())
        await login(client)
        job = await create_job(client)
        await client.post(f"/jobs/{job['id']}/apply")

        stats = (await client.get("/stats")).json()

        assert stats["total_jobs"] == 1
        assert stats["active_jobs"] == 1
        assert stats["total_applications"] == 1
        assert stats["total_counselors"] == 1
        assert stats["total_communities"] == 0

    @pytest.mark.asyncio
    async def test_search(self, client, counselor_service):
        await counselor_service.create_counselor(make_counselor())
        await login(client)
        await create_job(client)

        results = (await client.get("/search", params={"q": "career"})).json()
        jobs_only = (await client.get("/search", params={"q": "python"})).json()

        assert [c["name"] for c in results["counselors"]] == ["Dana Mentor"]
        assert len(jobs_only["jobs"]) == 1
        assert jobs_only["counselors"] == []
        assert jobs_only["communities"] == []

    @pytest.mark.asyncio
    async def test_health_and_metrics(self, client):
        assert (await client.get("/health")).json() == {"status": "healthy"}
        metrics = await client.get("/metrics")
        assert "http_requests_total" in metrics.text


def community_payload(**overrides) -> dict:
    return make_community(**overrides).model_dump(mode="json", exclude_none=True)


async def create_community(client, **overrides) -> dict:
    response = await client.post("/communities", json=community_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCommunityRoutes:
    @pytest.mark.asyncio
    async def test_create_read_like_and_search(self, client):
        await login(client)
        community = await create_community(client)

        assert community["created_by"] == "1"
        assert community["members"] == ["1"]

        fetched = await client.get(f"/communities/{community['id']}")
        assert fetched.json()["title"] == "Breaking into Data Science"

        listing = await client.get("/communities", params={"category": "Technology"})
        assert [c["id"] for c in listing.json()["communities"]] == [community["id"]]

        liked = await client.put(f"/communities/{community['id']}/like", json={"liked": True})
        assert liked.json() == {"likes": 1}

        found = await client.get("/communities/search", params={"q": "data"})
        assert [c["id"] for c in found.json()] == [community["id"]]

    @pytest.mark.asyncio
    async def test_only_creator_or_admin_edits(self, client, counselor_service):
        counselor = await counselor_service.create_counselor(make_counselor())
        await login(client)
        community = await create_community(client)

        await login(client, "dana@example.com", "secret123")
        patch = await client.patch(f"/communities/{community['id']}", json={"title": "Mine now"})
        restore = await client.post(f"/communities/{community['id']}/restore")
        joined = await client.post(f"/communities/{community['id']}/members")

        assert patch.status_code == 403
        assert restore.status_code == 403
        assert joined.json()["members"] == ["1", counselor.id]

    @pytest.mark.asyncio
    async def test_messages(self, client, counselor_service):
        await counselor_service.create_counselor(make_counselor())
        await login(client, "dana@example.com", "secret123")
        community = await create_community(client)

        sent = await client.post(
            f"/communities/{community['id']}/messages", json={"content": "  Welcome!  "}
        )
        assert sent.status_code == 201
        assert sent.json()["content"] == "Welcome!"

        empty = await client.post(f"/communities/{community['id']}/messages", json={"content": " "})
        assert empty.status_code == 422

        messages = await client.get(f"/communities/{community['id']}/messages")
        assert [m["user_name"] for m in messages.json()] == ["Dana Mentor"]

        message_id = sent.json()["id"]
        assert (await client.delete(f"/communities/messages/{message_id}")).status_code == 204
        assert (await client.delete(f"/communities/messages/{message_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_soft_delete_restore_and_purge(self, client):
        await login(client)
        community = await create_community(client)
        url = f"/communities/{community['id']}"

        deleted = await client.delete(url)
        assert deleted.json()["is_deleted"] is True
        assert (await client.get("/communities")).json()["communities"] == []

        restored = await client.post(f"{url}/restore")
        assert restored.json()["is_deleted"] is False

        assert (await client.delete(f"{url}/permanent")).status_code == 204
        assert (await client.get(url)).status_code == 404


class TestBookingRoutes:
    @pytest.mark.asyncio
    async def test_counselor_sets_availability_and_admin_books(self, client, counselor_service):
        counselor = await counselor_service.create_counselor(make_counselor())
        base = f"/counselors/{counselor.id}"

        await login(client, "dana@example.com", "secret123")
        pattern = await client.put(
            f"{base}/availability", json={"day": "Tuesday", "slots": ["14:00"]}
        )
        assert [d["day"] for d in pattern.json()] == ["Monday", "Tuesday"]

        days = (await client.get(f"{base}/slots")).json()
        assert days
        day = days[0]
        time = day["slots"][0]["time"]

        await login(client)
        booked = await client.post(f"{base}/bookings", json={"date": day["date"], "time": time})
        assert booked.status_code == 201
        assert booked.json()["user_id"] == "1"

        again = await client.post(f"{base}/bookings", json={"date": day["date"], "time": time})
        assert again.status_code == 409

        upcoming = (await client.get("/counselors/bookings/upcoming")).json()
        assert [(b["date"], b["time"]) for b in upcoming] == [(day["date"], time)]
        assert upcoming[0]["counselor_name"] == "Dana Mentor"

        cancelled = await client.delete(f"{base}/bookings/{day['date']}/{time}")
        assert cancelled.status_code == 204
        assert (await client.get("/counselors/bookings/upcoming")).json() == []

    @pytest.mark.asyncio
    async def test_counselor_cannot_manage_another(self, client, counselor_service):
        await counselor_service.create_counselor(make_counselor())
        other = await counselor_service.create_counselor(
            make_counselor(name="Robin Coach", email="robin@example.com")
        )
        await login(client, "dana@example.com", "secret123")

        response = await client.put(
            f"/counselors/{other.id}/availability", json={"day": "Friday", "slots": ["09:00"]}
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_slots_and_ratings(self, client, counselor_service):
        counselor = await counselor_service.create_counselor(make_counselor())
        await login(client)

        missing = await client.get(f"/counselors/{counselor.id}/slots/2030-01-07")
        assert missing.status_code == 404

        rated = await client.post(
            f"/counselors/{counselor.id}/ratings", json={"rating": 4, "feedback": "Helpful"}
        )
        assert rated.json() == {"counselor_id": counselor.id, "rating": 4.0}

        out_of_range = await client.post(f"/counselors/{counselor.id}/ratings", json={"rating": 6})
        assert out_of_range.status_code == 422
