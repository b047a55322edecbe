# Standard library imports
from uuid import uuid4

# Third-party imports
import pytest

# Local application imports
from decisiondeck.models import UserRole
from decisiondeck.utils.rate_limiter import AddressRateLimiter

API = "/api/v1"


@pytest.fixture
async def admin(make_user):
    return await make_user("chief", role=UserRole.ADMIN)


@pytest.fixture
async def voter(make_user):
    return await make_user("voter_one")


# ----- Auth -----


async def test_register_login_and_me(client):
    response = await client.post(
        f"{API}/auth/register",
        json={
            "username": "jane_doe",
            "email": "Jane@Example.com",
            "password": "secret123",
            "confirmPassword": "secret123",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["role"] == "voter"
    assert body["user"]["email"] == "jane@example.com"

    response = await client.post(f"{API}/auth/login", json={"identifier": "JANE_DOE", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["accessToken"]

    response = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == "jane_doe"


async def test_register_rejects_taken_username(client, voter):
    response = await client.post(
        f"{API}/auth/register",
        json={"username": voter.username, "email": "other@example.com", "password": "secret123"},
    )
    assert response.status_code == 409
    assert response.json()["ok"] is False


async def test_register_validation_errors_name_the_field(client):
    response = await client.post(
        f"{API}/auth/register",
        json={"username": "no spaces allowed", "email": "jane@example.com", "password": "secret123"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "bad_request"
    assert [d["field"] for d in error["details"]] == ["username"]


async def test_login_with_wrong_password(client, voter):
    response = await client.post(f"{API}/auth/login", json={"identifier": voter.email, "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


async def test_login_is_rate_limited(client, voter):
    for _ in range(5):
        response = await client.post(f"{API}/auth/login", json={"identifier": voter.email, "password": "wrong-one"})
        assert response.status_code == 401

    response = await client.post(f"{API}/auth/login", json={"identifier": voter.email, "password": "secret123"})

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0
    assert response.json()["error"]["code"] == "too_many_requests"


async def test_api_routes_share_a_general_limit(client, app):
    app.state.api_rate_limiter = AddressRateLimiter(max_attempts=2, window_seconds=60, scope="api")

    for _ in range(2):
        assert (await client.get(f"{API}/candidates")).status_code == 200
    response = await client.get(f"{API}/votes/results/President")

    assert response.status_code == 429
    assert response.json()["error"]["message"] == "Too many requests from this address. Please try again later."
    # Health checks stay outside the API limit
    assert (await client.get("/health")).status_code == 200


async def test_refresh_token(client, voter):
    response = await client.post(f"{API}/auth/login", json={"identifier": voter.username, "password": "secret123"})
    refresh = response.json()["refreshToken"]

    response = await client.post(f"{API}/auth/token/refresh", json={"refreshToken": refresh})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(voter.id)

    # Access tokens cannot be used as refresh tokens
    access = response.json()["accessToken"]
    response = await client.post(f"{API}/auth/token/refresh", json={"refreshToken": access})
    assert response.status_code == 401


async def test_protected_route_needs_token(client):
    response = await client.get(f"{API}/auth/me")
    assert response.status_code == 401

    response = await client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_deactivated_account_loses_access(client, admin, voter, headers_for):
    assert (await client.get(f"{API}/auth/me", headers=headers_for(voter))).status_code == 200

    response = await client.delete(f"{API}/users/{voter.id}", headers=headers_for(admin))
    assert response.status_code == 200
    assert response.json()["isActive"] is False

    response = await client.get(f"{API}/auth/me", headers=headers_for(voter))
    assert response.status_code == 401


async def test_admin_cannot_deactivate_self(client, admin, headers_for):
    response = await client.delete(f"{API}/users/{admin.id}", headers=headers_for(admin))
    assert response.status_code == 403


async def test_user_listing_is_admin_only(client, admin, voter, headers_for):
    assert (await client.get(f"{API}/users", headers=headers_for(voter))).status_code == 403

    response = await client.get(f"{API}/users", params={"role": "voter"}, headers=headers_for(admin))
    assert response.status_code == 200
    assert [u["username"] for u in response.json()["users"]] == ["voter_one"]


async def test_demotion_applies_before_token_expiry(client, admin, make_user, headers_for):
    deputy = await make_user("deputy", role=UserRole.ADMIN)
    deputy_headers = headers_for(deputy)
    assert (await client.get(f"{API}/users", headers=deputy_headers)).status_code == 200

    response = await client.put(f"{API}/users/{deputy.id}/role", json={"role": "voter"}, headers=headers_for(admin))
    assert response.status_code == 200

    assert (await client.get(f"{API}/users", headers=deputy_headers)).status_code == 403


# ----- Candidates -----


async def test_candidate_management_is_admin_only(client, admin, voter, headers_for):
    payload = {"name": "Alice", "position": "President", "party": "Blue"}

    response = await client.post(f"{API}/candidates", json=payload, headers=headers_for(voter))
    assert response.status_code == 403

    response = await client.post(f"{API}/candidates", json=payload, headers=headers_for(admin))
    assert response.status_code == 201
    candidate = response.json()
    assert candidate["voteCount"] == 0
    assert candidate["isActive"] is True

    response = await client.get(f"{API}/candidates", params={"position": "President"})
    assert [c["name"] for c in response.json()["candidates"]] == ["Alice"]

    response = await client.delete(f"{API}/candidates/{candidate['id']}", headers=headers_for(admin))
    assert response.json()["isActive"] is False

    response = await client.get(f"{API}/candidates")
    assert response.json()["total"] == 0


async def test_candidate_image_url_must_be_an_image(client, admin, headers_for):
    response = await client.post(
        f"{API}/candidates",
        json={"name": "Alice", "position": "President", "imageUrl": "ftp://example.com/alice.txt"},
        headers=headers_for(admin),
    )
    assert response.status_code == 400


async def test_unknown_candidate(client):
    response = await client.get(f"{API}/candidates/{uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "candidate_not_found"


# ----- Votes -----


async def test_vote_flow(client, admin, voter, make_candidate, headers_for):
    alice = await make_candidate("Alice", "President")
    bob = await make_candidate("Bob", "President")

    response = await client.post(
        f"{API}/votes",
        json={"candidateId": str(alice.id), "position": "President"},
        headers={**headers_for(voter), "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/121.0"},
    )
    assert response.status_code == 201
    receipt = response.json()
    assert receipt["candidateId"] == str(alice.id)
    assert receipt["newCount"] == 1

    response = await client.post(
        f"{API}/votes",
        json={"candidateId": str(bob.id), "position": "President"},
        headers=headers_for(voter),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "duplicate_vote"

    response = await client.get(f"{API}/votes/results/President")
    results = response.json()
    assert results["totalVotes"] == 1
    assert {r["name"]: r["percentage"] for r in results["results"]} == {"Alice": 100.0, "Bob": 0.0}

    response = await client.get(f"{API}/votes/history", headers=headers_for(voter))
    history = response.json()
    assert history["total"] == 1
    assert history["votes"][0]["browser"] == "Firefox"

    response = await client.get(f"{API}/auth/me", headers=headers_for(voter))
    assert response.json()["totalVotes"] == 1

    response = await client.put(f"{API}/votes/{receipt['voteId']}/invalidate", headers=headers_for(voter))
    assert response.status_code == 403

    response = await client.put(f"{API}/votes/{receipt['voteId']}/invalidate", headers=headers_for(admin))
    assert response.status_code == 200
    assert response.json()["isValid"] is False
    assert response.json()["newCount"] == 0


async def test_vote_needs_authentication(client, make_candidate):
    alice = await make_candidate("Alice", "President")
    response = await client.post(f"{API}/votes", json={"candidateId": str(alice.id), "position": "President"})
    assert response.status_code == 401


async def test_vote_for_wrong_position(client, voter, make_candidate, headers_for):
    alice = await make_candidate("Alice", "President")
    response = await client.post(
        f"{API}/votes",
        json={"candidateId": str(alice.id), "position": "Treasurer"},
        headers=headers_for(voter),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "position_mismatch"


async def test_vote_broadcast_reaches_subscribers(client, app, voter, make_candidate, headers_for):
    class Screen:
        def __init__(self):
            self.sent = []

        async def send_json(self, data, mode="text"):
            self.sent.append(data)

    screen = Screen()
    app.state.room_manager.join(screen, "vote-President")
    alice = await make_candidate("Alice", "President")

    await client.post(
        f"{API}/votes",
        json={"candidateId": str(alice.id), "position": "President"},
        headers=headers_for(voter),
    )

    assert screen.sent == [
        {"event": "vote-updated", "data": {"position": "President", "candidateId": str(alice.id), "voteCount": 1}}
    ]


async def test_admin_stats_rejects_inverted_window(client, admin, headers_for):
    response = await client.get(
        f"{API}/votes/stats/admin",
        params={"startDate": "2024-05-02T00:00:00Z", "endDate": "2024-05-01T00:00:00Z"},
        headers=headers_for(admin),
    )
    assert response.status_code == 400


# ----- Analytics -----


async def test_analytics_endpoints(client, admin, voter, make_candidate, headers_for):
    alice = await make_candidate("Alice", "President")
    await client.post(
        f"{API}/votes",
        json={"candidateId": str(alice.id), "position": "President"},
        headers=headers_for(voter),
    )

    response = await client.get(f"{API}/analytics/dashboard", params={"timeRange": "24h"}, headers=headers_for(voter))
    assert response.status_code == 200
    assert response.json()["overview"]["totalVotes"] == 1

    response = await client.get(f"{API}/analytics/candidates/{alice.id}", headers=headers_for(voter))
    assert response.json()["demographics"] is None
    response = await client.get(f"{API}/analytics/candidates/{alice.id}", headers=headers_for(admin))
    assert response.json()["demographics"] == [{"role": "voter", "count": 1}]

    response = await client.get(f"{API}/analytics/positions/President", headers=headers_for(voter))
    assert response.json()["overview"]["totalVotes"] == 1

    assert (await client.get(f"{API}/analytics/users/behavior", headers=headers_for(voter))).status_code == 403
    response = await client.get(f"{API}/analytics/users/behavior", headers=headers_for(admin))
    assert response.json()["engagement"]["totalVoters"] == 1

    response = await client.get(f"{API}/analytics/realtime", headers=headers_for(voter))
    assert response.json()["last24Hours"]["totalVotes"] == 1


async def test_analytics_rejects_unknown_time_range(client, voter, headers_for):
    response = await client.get(f"{API}/analytics/dashboard", params={"timeRange": "1y"}, headers=headers_for(voter))
    assert response.status_code == 400
