import uuid

import pytest

from shared.constants import Role

API = "/api/v1"


@pytest.mark.asyncio
async def test_health(async_client) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "social"}


@pytest.mark.asyncio
async def test_private_follow_approval_flow(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True, bio="photographer")

    r = await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice.id))
    assert r.status_code == 200
    assert r.json()["state"] == "pending"

    r = await async_client.get(f"{API}/notifications", headers=auth(bob.id))
    [item] = r.json()["items"]
    assert item["type"] == "follow_request"
    assert item["sender"]["username"] == "alice"

    r = await async_client.get(f"{API}/notifications/unread-count", headers=auth(bob.id))
    assert r.json() == {"unread": 1, "pending_follow_requests": 1}

    r = await async_client.get(f"{API}/users/me/follow-requests", headers=auth(bob.id))
    assert [i["user"]["id"] for i in r.json()["items"]] == [str(alice.id)]

    r = await async_client.get(f"{API}/users/{bob.id}/profile", headers=auth(alice.id))
    profile = r.json()
    assert profile["is_restricted"] is True
    assert profile["bio"] is None
    assert profile["follow_state"] == "pending"

    r = await async_client.get(f"{API}/users/{bob.id}/followers", headers=auth(alice.id))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "permission"

    r = await async_client.post(
        f"{API}/users/me/follow-requests/{alice.id}/approve", headers=auth(bob.id)
    )
    assert r.status_code == 200
    assert r.json()["state"] == "accepted"

    r = await async_client.get(f"{API}/notifications", headers=auth(alice.id))
    assert [i["type"] for i in r.json()["items"]] == ["follow_accept"]

    r = await async_client.get(f"{API}/users/{bob.id}/profile", headers=auth(alice.id))
    profile = r.json()
    assert profile["is_restricted"] is False
    assert profile["bio"] == "photographer"
    assert profile["follower_count"] == 1

    r = await async_client.get(f"{API}/users/{bob.id}/followers", headers=auth(alice.id))
    assert r.status_code == 200
    assert r.json()["total"] == 1

    r = await async_client.get(f"{API}/users/{bob.id}/follow-status", headers=auth(alice.id))
    assert r.json()["is_following"] is True


@pytest.mark.asyncio
async def test_error_envelope_kinds(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")

    r = await async_client.post(f"{API}/users/{alice.id}/follow", headers=auth(alice.id))
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "validation"

    await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice.id))
    r = await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice.id))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"
    assert r.json()["request_id"] == r.headers["X-Request-ID"]

    r = await async_client.post(f"{API}/users/{uuid.uuid4()}/follow", headers=auth(alice.id))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"

    r = await async_client.post(f"{API}/users/{bob.id}/follow")
    assert r.status_code == 401

    r = await async_client.post(f"{API}/notifications/{uuid.uuid4()}/read", headers=auth(alice.id))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


@pytest.mark.asyncio
async def test_block_hides_profile_and_forbids_follow(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice.id))

    r = await async_client.post(f"{API}/users/{alice.id}/block", headers=auth(bob.id))
    assert r.status_code == 200
    assert r.json()["follow_edges_removed"] == 1

    r = await async_client.get(f"{API}/users/{bob.id}/profile", headers=auth(alice.id))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "permission"

    r = await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice.id))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "blocked"

    r = await async_client.get(f"{API}/users/me/following", headers=auth(alice.id))
    assert r.json()["total"] == 0

    r = await async_client.get(f"{API}/users/me/blocked", headers=auth(bob.id))
    assert [i["user"]["username"] for i in r.json()["items"]] == ["alice"]

    r = await async_client.delete(f"{API}/users/{alice.id}/block", headers=auth(bob.id))
    assert r.status_code == 204
    r = await async_client.get(f"{API}/users/{bob.id}/profile", headers=auth(alice.id))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_internal_event_intake(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    hidden = await make_account("hidden", is_private=True)

    r = await async_client.post(
        f"{API}/internal/events/mention",
        json={"actor_id": str(alice.id), "text": "thanks @bob and @hidden and @nobody"},
    )
    assert r.status_code == 202
    assert r.json() == {"created": 1}

    like = {"actor_id": str(alice.id), "post_id": str(uuid.uuid4()), "content_owner_id": str(bob.id)}
    r = await async_client.post(f"{API}/internal/events/like", json=like)
    assert r.json() == {"created": 1}
    r = await async_client.post(f"{API}/internal/events/like", json=like)
    assert r.json() == {"created": 0}

    r = await async_client.post(
        f"{API}/internal/events/comment",
        json={
            "actor_id": str(alice.id),
            "post_id": str(uuid.uuid4()),
            "post_owner_id": str(bob.id),
            "comment_id": str(uuid.uuid4()),
            "text": "great",
        },
    )
    assert r.json() == {"created": 1}

    r = await async_client.get(f"{API}/notifications/unread-count", headers=auth(bob.id))
    assert r.json()["unread"] == 3

    r = await async_client.get(
        f"{API}/internal/visibility",
        params={"viewer_id": str(alice.id), "subject_id": str(hidden.id)},
    )
    assert r.json()["verdict"] == "deny_private"
    assert r.json()["summary_visible"] is True

    r = await async_client.post(f"{API}/internal/events/like", json={"actor_id": "nope"})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "validation"


@pytest.mark.asyncio
async def test_mark_all_read(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    carol = await make_account("carol")
    for follower in (alice, carol):
        await async_client.post(f"{API}/users/{bob.id}/follow", headers=auth(follower.id))

    r = await async_client.post(f"{API}/notifications/mark-all-read", headers=auth(bob.id))
    assert r.json() == {"updated": 2}

    r = await async_client.get(
        f"{API}/notifications", params={"only_unread": True}, headers=auth(bob.id)
    )
    assert r.json()["total"] == 0


@pytest.mark.asyncio
async def test_report_review_notifies_reporter(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    mod = await make_account("mod")

    r = await async_client.post(
        f"{API}/users/{bob.id}/report",
        json={"target_type": "user", "target_id": str(bob.id), "reason": "spam"},
        headers=auth(alice.id),
    )
    assert r.status_code == 201
    report_id = r.json()["id"]

    r = await async_client.get(f"{API}/admin/social/reports", headers=auth(alice.id))
    assert r.status_code == 403

    r = await async_client.patch(
        f"{API}/admin/social/reports/{report_id}/review",
        json={"status": "actioned", "action_taken": "warned"},
        headers=auth(mod.id, Role.MODERATOR),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "actioned"

    r = await async_client.get(f"{API}/notifications", headers=auth(alice.id))
    [item] = r.json()["items"]
    assert item["type"] == "report_resolved"
    assert item["context"]["action_taken"] == "warned"


@pytest.mark.asyncio
async def test_follow_rate_limit_uses_error_envelope(async_client, make_account, auth) -> None:
    alice = await make_account("alice")
    headers = auth(alice.id)

    for _ in range(50):
        r = await async_client.post(f"{API}/users/{uuid.uuid4()}/follow", headers=headers)
        assert r.status_code == 404

    r = await async_client.post(f"{API}/users/{uuid.uuid4()}/follow", headers=headers)
    assert r.status_code == 429
    body = r.json()
    assert body["error"]["code"] == "rate_limited"
    assert body["error"]["message"].startswith("Rate limit exceeded")
    assert body["request_id"] == r.headers["X-Request-ID"]
