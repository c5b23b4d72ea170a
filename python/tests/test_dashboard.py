"""Tests for the channel dashboard routes."""

from fastapi.testclient import TestClient

from tests.factories import at_minute, create_test_user, create_test_video
from tests.helpers import auth_headers


class TestChannelStats:
    def test_empty_channel_reports_zeros(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.get("/dashboard/stats", headers=auth_headers(token_service, user))

        assert response.status_code == 200
        assert response.json()["data"] == {
            "totalSubscribers": 0,
            "totalViews": 0,
            "totalLikes": 0,
        }

    def test_counters(self, client: TestClient, db_session, token_service):
        owner = create_test_user(db_session)
        fan = create_test_user(db_session)
        create_test_video(db_session, owner, views=10)
        create_test_video(db_session, owner, views=5, is_published=False)
        liked = create_test_video(db_session, fan)
        owner_headers = auth_headers(token_service, owner)
        client.post(f"/subscriptions/c/{owner.id}", headers=auth_headers(token_service, fan))
        client.post(f"/likes/toggle/v/{liked.id}", headers=owner_headers)

        response = client.get("/dashboard/stats", headers=owner_headers)

        assert response.json()["data"] == {
            "totalSubscribers": 1,
            "totalViews": 15,
            "totalLikes": 1,
        }


class TestChannelVideos:
    def test_all_own_videos_with_like_counts(self, client: TestClient, db_session, token_service):
        owner = create_test_user(db_session)
        fans = [create_test_user(db_session) for _ in range(2)]
        popular = create_test_video(db_session, owner, title="popular", created_at=at_minute(1))
        create_test_video(
            db_session, owner, title="draft", is_published=False, created_at=at_minute(2)
        )
        create_test_video(db_session, fans[0], title="not mine")
        for fan in fans:
            client.post(f"/likes/toggle/v/{popular.id}", headers=auth_headers(token_service, fan))

        response = client.get("/dashboard/videos", headers=auth_headers(token_service, owner))

        assert response.status_code == 200
        videos = response.json()["data"]
        assert [(v["title"], v["likes"], v["isPublished"]) for v in videos] == [
            ("draft", 0, False),
            ("popular", 2, True),
        ]
