# mypy: ignore-errors
# tests/v1/test_communities_api.py
"""Tests for community, join-request and invitation endpoints."""

from fastapi import status


def _create(client, headers, name, visibility="PUBLIC"):
    response = client.post(
        "/api/v1/communities/",
        json={"name": name, "visibility": visibility, "description": "A club"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_create_and_get_community(client, alice, auth_headers) -> None:
    """Creating a community makes the caller its ADMIN."""
    community = _create(client, auth_headers(alice), "Design Club")
    assert community["creator_id"] == alice.id
    assert community["created_at"].endswith("Z")

    response = client.get(f"/api/v1/communities/{community['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Design Club"

    permissions = client.get(
        f"/api/v1/communities/{community['id']}/permissions", headers=auth_headers(alice)
    ).json()
    assert permissions["role"] == "ADMIN"
    assert "remove_member" in permissions["actions"]
    assert "remove_admin" not in permissions["actions"]


def test_duplicate_name_conflicts(client, alice, bob, auth_headers) -> None:
    _create(client, auth_headers(alice), "Design Club")
    response = client.post(
        "/api/v1/communities/", json={"name": "DESIGN CLUB"}, headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_get_nonexistent_community(client) -> None:
    response = client.get("/api/v1/communities/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "not_found"


def test_join_public_and_leave(client, alice, bob, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "Open")
    response = client.post(
        f"/api/v1/communities/{community['id']}/join", headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["joined"] is True
    assert body["membership"]["role"] == "USER"
    assert body["join_request"] is None

    response = client.post(
        f"/api/v1/communities/{community['id']}/leave", headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_creator_leave_is_forbidden(client, alice, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "Mine")
    response = client.post(
        f"/api/v1/communities/{community['id']}/leave", headers=auth_headers(alice)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "forbidden"


def test_private_join_request_review_flow(client, alice, bob, make_user, auth_headers) -> None:
    """Scenario: request, moderator acceptance, then a duplicate request conflicts."""
    moderator = make_user("u3")
    community = _create(client, auth_headers(alice), "design-club", "PRIVATE")
    cid = community["id"]

    client.post(f"/api/v1/communities/{cid}/join", headers=auth_headers(moderator))
    members = client.get(f"/api/v1/communities/{cid}/members").json()
    assert [member["user_id"] for member in members] == [alice.id]

    requests = client.get(
        f"/api/v1/communities/{cid}/join-requests", headers=auth_headers(alice)
    ).json()
    moderator_request = requests[0]
    client.post(
        f"/api/v1/join-requests/{moderator_request['id']}/review",
        json={"action": "accept"},
        headers=auth_headers(alice),
    )
    moderator_membership = next(
        member
        for member in client.get(f"/api/v1/communities/{cid}/members").json()
        if member["user_id"] == moderator.id
    )
    response = client.patch(
        f"/api/v1/communities/{cid}/members/{moderator_membership['id']}",
        json={"role": "MODERATOR"},
        headers=auth_headers(alice),
    )
    assert response.json()["role"] == "MODERATOR"

    response = client.post(
        f"/api/v1/communities/{cid}/join-requests", headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_201_CREATED
    request_id = response.json()["id"]

    response = client.post(
        f"/api/v1/join-requests/{request_id}/review",
        json={"action": "accept"},
        headers=auth_headers(moderator),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ACCEPTED"

    response = client.post(
        f"/api/v1/communities/{cid}/join-requests", headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_remove_member_rules(client, alice, bob, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "Open")
    cid = community["id"]
    bob_membership = client.post(
        f"/api/v1/communities/{cid}/join", headers=auth_headers(bob)
    ).json()["membership"]
    members = client.get(f"/api/v1/communities/{cid}/members").json()
    alice_membership = next(m for m in members if m["user_id"] == alice.id)

    response = client.delete(
        f"/api/v1/communities/{cid}/members/{alice_membership['id']}", headers=auth_headers(alice)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(
        f"/api/v1/communities/{cid}/members/{bob_membership['id']}", headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "authorization_denied"

    response = client.delete(
        f"/api/v1/communities/{cid}/members/{bob_membership['id']}", headers=auth_headers(alice)
    )
    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_invitation_flow(client, alice, bob, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "design-club", "PRIVATE")
    cid = community["id"]

    response = client.post(
        f"/api/v1/communities/{cid}/invitations",
        json={"username": bob.username},
        headers=auth_headers(alice),
    )
    assert response.status_code == status.HTTP_201_CREATED
    invitation = response.json()

    received = client.get("/api/v1/invitations/", headers=auth_headers(bob)).json()
    assert [item["id"] for item in received] == [invitation["id"]]

    response = client.post(
        f"/api/v1/invitations/{invitation['id']}/respond",
        json={"action": "accept"},
        headers=auth_headers(bob),
    )
    assert response.json()["status"] == "ACCEPTED"

    permissions = client.get(
        f"/api/v1/communities/{cid}/permissions", headers=auth_headers(bob)
    ).json()
    assert permissions["role"] == "USER"


def test_bulk_invite_endpoint(client, alice, bob, carol, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "Open")
    response = client.post(
        f"/api/v1/communities/{community['id']}/invitations/bulk",
        json={"usernames": [bob.username, carol.username, "ghost"]},
        headers=auth_headers(alice),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "invited": [bob.username, carol.username],
        "already_members": [],
        "already_invited": [],
        "not_found": ["ghost"],
    }


def test_update_and_delete_community(client, alice, bob, auth_headers) -> None:
    community = _create(client, auth_headers(alice), "Open")
    cid = community["id"]

    response = client.patch(
        f"/api/v1/communities/{cid}", json={"name": "Renamed"}, headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.patch(
        f"/api/v1/communities/{cid}",
        json={"name": "Renamed", "visibility": "PRIVATE"},
        headers=auth_headers(alice),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Renamed"
    assert response.json()["description"] == "A club"
    assert response.json()["visibility"] == "PRIVATE"

    response = client.delete(f"/api/v1/communities/{cid}", headers=auth_headers(alice))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/communities/{cid}").status_code == status.HTTP_404_NOT_FOUND


def test_event_creator_edits_after_demotion(client, alice, bob, carol, auth_headers) -> None:
    """A demoted creator still edits their event; another USER is refused."""
    cid = _create(client, auth_headers(alice), "Open")["id"]
    bob_membership = client.post(
        f"/api/v1/communities/{cid}/join", headers=auth_headers(bob)
    ).json()["membership"]
    client.post(f"/api/v1/communities/{cid}/join", headers=auth_headers(carol))

    event_body = {
        "title": "Meetup",
        "starts_at": "2030-05-01T12:00:00Z",
        "ends_at": "2030-05-01T14:00:00Z",
    }
    response = client.post(
        f"/api/v1/communities/{cid}/events", json=event_body, headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    client.patch(
        f"/api/v1/communities/{cid}/members/{bob_membership['id']}",
        json={"role": "MODERATOR"},
        headers=auth_headers(alice),
    )
    response = client.post(
        f"/api/v1/communities/{cid}/events", json=event_body, headers=auth_headers(bob)
    )
    assert response.status_code == status.HTTP_201_CREATED
    event = response.json()
    assert event["starts_at"].endswith("Z")

    client.patch(
        f"/api/v1/communities/{cid}/members/{bob_membership['id']}",
        json={"role": "USER"},
        headers=auth_headers(alice),
    )
    url = f"/api/v1/communities/{cid}/events/{event['id']}"
    response = client.patch(url, json={"location": "Hall B"}, headers=auth_headers(bob))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["location"] == "Hall B"

    response = client.patch(url, json={"title": "Mine"}, headers=auth_headers(carol))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    response = client.delete(url, headers=auth_headers(carol))
    assert response.status_code == status.HTTP_403_FORBIDDEN

    listing = client.get(f"/api/v1/communities/{cid}/events", headers=auth_headers(carol))
    assert [row["id"] for row in listing.json()] == [event["id"]]

    response = client.delete(url, headers=auth_headers(bob))
    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_events_hidden_from_non_members(client, alice, bob, auth_headers) -> None:
    cid = _create(client, auth_headers(alice), "Open")["id"]
    response = client.get(f"/api/v1/communities/{cid}/events", headers=auth_headers(bob))
    assert response.status_code == status.HTTP_403_FORBIDDEN
