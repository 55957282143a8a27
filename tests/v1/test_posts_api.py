# mypy: ignore-errors
# tests/v1/test_posts_api.py
"""Tests for post read and moderation endpoints."""

from fastapi import status

from chorus_graph.models import CommunityVisibility, PostVisibility


def test_anonymous_sees_public_posts_only(client, alice, make_post) -> None:
    public = make_post(alice, PostVisibility.PUBLIC)
    make_post(alice, PostVisibility.FOLLOWERS)
    make_post(alice, PostVisibility.PRIVATE)

    response = client.get("/api/v1/posts/")
    assert response.status_code == status.HTTP_200_OK
    assert [post["id"] for post in response.json()] == [public.id]


def test_followers_posts_follow_the_follow_edge(
    client, alice, bob, make_post, follow, auth_headers
) -> None:
    post = make_post(alice, PostVisibility.FOLLOWERS)
    response = client.get(f"/api/v1/posts/{post.id}", headers=auth_headers(bob))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    follow(bob, alice)
    response = client.get(f"/api/v1/posts/{post.id}", headers=auth_headers(bob))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["visibility"] == "followers"


def test_private_community_posts_are_opaque(
    client, alice, bob, make_community, make_post, auth_headers
) -> None:
    club = make_community(alice, "club", CommunityVisibility.PRIVATE)
    make_post(alice, PostVisibility.PUBLIC, community=club)

    response = client.get(f"/api/v1/communities/{club.id}/posts", headers=auth_headers(bob))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.get("/api/v1/posts/", params={"community_id": club.id})
    assert response.json() == []

    response = client.get(f"/api/v1/communities/{club.id}/posts", headers=auth_headers(alice))
    assert len(response.json()) == 1


def test_moderation_delete(client, alice, bob, make_community, make_post, auth_headers) -> None:
    community = make_community(alice, "open")
    post = make_post(bob, community=community)

    response = client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(alice))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["deleted"] is True
    assert client.get(f"/api/v1/posts/{post.id}").status_code == status.HTTP_404_NOT_FOUND
