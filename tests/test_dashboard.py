"""
Tests for the creator dashboard.
"""

from datetime import datetime, timedelta

import pytest

from vidgraph.errors import InvalidArgument
from vidgraph.models import Like, Subscription
from vidgraph.services import toggles
from vidgraph.services.dashboard import get_channel_analytics, get_channel_stats, get_channel_videos
from vidgraph.services.pagination import PageParams


class TestChannelStats:
    """Test lifetime channel totals."""

    def test_total_views_is_sum_of_owned_videos(self, db, make_user, make_video):
        owner = make_user("owner")
        for views in (3, 40, 500):
            make_video(owner, views=views)
        make_video(make_user("other"), views=10_000)

        stats = get_channel_stats(db, owner.id)

        assert stats["total_videos"] == 3
        assert stats["total_views"] == 543

    def test_owner_without_videos_gets_zeros(self, db, make_user):
        owner = make_user("owner")

        stats = get_channel_stats(db, owner.id)

        assert stats["total_videos"] == 0
        assert stats["total_views"] == 0
        assert stats["total_likes"] == 0
        assert stats["recent_videos"] == []
        assert stats["top_videos"] == []

    def test_counts_subscribers_likes_and_playlists(self, db, make_user, make_video, make_tweet, make_playlist):
        owner = make_user("owner")
        fans = [make_user(f"fan{i}") for i in range(3)]
        video = make_video(owner)
        tweet = make_tweet(owner)
        make_playlist(owner)
        for fan in fans:
            toggles.toggle_subscription(db, fan.id, owner.id)
            toggles.toggle_like(db, fan.id, "video", video.id)
        # likes on anything other than owned videos are not counted
        toggles.toggle_like(db, fans[0].id, "tweet", tweet.id)

        stats = get_channel_stats(db, owner.id)

        assert stats["total_subscribers"] == 3
        assert stats["total_likes"] == 3
        assert stats["total_playlists"] == 1

    def test_recent_and_top_videos(self, db, make_user, make_video):
        owner = make_user("owner")
        for i in range(7):
            make_video(owner, title=f"v{i}", views=i * 10, age_minutes=i)

        stats = get_channel_stats(db, owner.id)

        assert [v["title"] for v in stats["recent_videos"]] == ["v0", "v1", "v2", "v3", "v4"]
        assert [v["views"] for v in stats["top_videos"]] == [60, 50, 40, 30, 20]


class TestChannelAnalytics:
    """Test trailing-window analytics."""

    NOW = datetime(2026, 3, 10, 12, 0, 0)

    def test_window_bounds(self, db, make_user):
        owner = make_user("owner")
        for days in (0, 366, -3):
            with pytest.raises(InvalidArgument):
                get_channel_analytics(db, owner.id, days)

    def test_daily_buckets(self, db, make_user, make_video):
        owner = make_user("owner")
        fan = make_user("fan")
        v1 = make_video(owner, views=10)
        v2 = make_video(owner, views=30)
        old = make_video(owner, views=999)
        v1.created_at = datetime(2026, 3, 8, 9, 0)
        v2.created_at = datetime(2026, 3, 8, 22, 30)
        old.created_at = datetime(2025, 1, 1)
        db.add(Subscription(subscriber_id=fan.id, channel_id=owner.id, created_at=datetime(2026, 3, 9, 1, 0)))
        db.add(Like(user_id=fan.id, video_id=v1.id))
        db.add(Like(user_id=fan.id, video_id=old.id))
        db.commit()

        analytics = get_channel_analytics(db, owner.id, 7, now=self.NOW)

        assert analytics["video_views"] == [{"date": "2026-03-08", "total_views": 40, "video_count": 2}]
        assert analytics["subscriber_growth"] == [{"date": "2026-03-09", "new_subscribers": 1}]
        assert analytics["engagement_metrics"] == {
            "total_views": 40,
            "total_likes": 1,
            "avg_views_per_video": 20.0,
            "avg_likes_per_video": 0.5,
        }

    def test_empty_window(self, db, make_user):
        owner = make_user("owner")

        analytics = get_channel_analytics(db, owner.id, 30, now=self.NOW)

        assert analytics["video_views"] == []
        assert analytics["engagement_metrics"]["avg_views_per_video"] == 0.0


class TestChannelVideos:
    """Test the owner's own video list."""

    def test_status_filter_and_like_counts(self, db, make_user, make_video):
        owner = make_user("owner")
        fan = make_user("fan")
        live = make_video(owner, title="live", age_minutes=2)
        make_video(owner, title="draft", is_published=False, age_minutes=1)
        toggles.toggle_like(db, fan.id, "video", live.id)
        toggles.toggle_like(db, owner.id, "video", live.id)

        everything = get_channel_videos(db, owner.id, PageParams())
        published = get_channel_videos(db, owner.id, PageParams(), status="published")
        drafts = get_channel_videos(db, owner.id, PageParams(), status="unpublished")

        assert [v["title"] for v in everything.items] == ["draft", "live"]
        assert [(v["title"], v["likes_count"]) for v in published.items] == [("live", 2)]
        assert [(v["title"], v["likes_count"]) for v in drafts.items] == [("draft", 0)]

    def test_invalid_status(self, db, make_user):
        with pytest.raises(InvalidArgument):
            get_channel_videos(db, make_user("owner").id, PageParams(), status="archived")

    def test_other_channels_excluded(self, db, make_user, make_video):
        owner = make_user("owner")
        make_video(make_user("other"))

        assert get_channel_videos(db, owner.id, PageParams()).total_items == 0
