"""
Tests for the denormalized read views.
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import event

from vidgraph.errors import InvalidArgument, NotFound
from vidgraph.models import Like, Subscription, WatchHistoryEntry, utcnow
from vidgraph.services import feeds, toggles, videos
from vidgraph.services.pagination import Page, PageParams


class TestPagination:
    """Test page arithmetic."""

    def test_page_math(self):
        page = Page(items=[], total_items=25, current_page=2, limit=10)
        assert page.total_pages == 3
        assert page.has_next_page is True

        last = Page(items=[], total_items=25, current_page=3, limit=10)
        assert last.has_next_page is False

    def test_empty_page(self):
        page = Page(items=[], total_items=0, current_page=1, limit=10)
        assert page.total_pages == 0
        assert page.has_next_page is False
        assert page.to_dict() == {
            "items": [],
            "totalItems": 0,
            "currentPage": 1,
            "totalPages": 0,
            "hasNextPage": False,
        }

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    def test_invalid_params(self, page, limit):
        with pytest.raises(InvalidArgument):
            PageParams(page=page, limit=limit)

    def test_offset(self):
        assert PageParams(page=3, limit=10).offset == 20


class TestVideoFeed:
    """Test the published video feed."""

    @pytest.fixture
    def catalog(self, make_user, make_video):
        owner = make_user("creator")
        made = [make_video(owner, title=f"Video {i:02d}", age_minutes=i) for i in range(25)]
        make_video(owner, title="Draft", is_published=False)
        return owner, made

    def test_pages_over_25_videos(self, db, catalog):
        page2 = feeds.video_feed(db, PageParams(page=2, limit=10))
        assert len(page2.items) == 10
        assert page2.total_items == 25
        assert page2.total_pages == 3
        assert page2.has_next_page is True

        page3 = feeds.video_feed(db, PageParams(page=3, limit=10))
        assert len(page3.items) == 5
        assert page3.has_next_page is False

    def test_newest_first_by_default(self, db, catalog):
        page = feeds.video_feed(db, PageParams(page=1, limit=3))
        assert [v["title"] for v in page.items] == ["Video 00", "Video 01", "Video 02"]

    def test_unpublished_videos_are_hidden(self, db, catalog):
        page = feeds.video_feed(db, PageParams(page=1, limit=100))
        assert "Draft" not in {v["title"] for v in page.items}

    def test_items_carry_owner_summary(self, db, catalog):
        owner, _ = catalog
        item = feeds.video_feed(db, PageParams()).items[0]
        assert item["owner"] == {
            "id": owner.id,
            "full_name": owner.full_name,
            "username": "creator",
            "avatar": owner.avatar,
        }

    def test_search_is_case_insensitive_on_title_or_description(self, db, make_user, make_video):
        owner = make_user("creator")
        make_video(owner, title="Learning PYTHON fast")
        make_video(owner, title="Cooking", description="a python-free recipe")
        make_video(owner, title="Gardening")

        page = feeds.video_feed(db, PageParams(), query="python")
        assert {v["title"] for v in page.items} == {"Learning PYTHON fast", "Cooking"}

    def test_search_treats_wildcards_literally(self, db, make_user, make_video):
        owner = make_user("creator")
        make_video(owner, title="100% real")
        make_video(owner, title="1000 reasons")

        page = feeds.video_feed(db, PageParams(), query="100%")
        assert [v["title"] for v in page.items] == ["100% real"]

    def test_owner_filter(self, db, make_user, make_video):
        alice = make_user("alice")
        bob = make_user("bob")
        make_video(alice, title="from alice")
        make_video(bob, title="from bob")

        page = feeds.video_feed(db, PageParams(), owner_id=bob.id)
        assert [v["title"] for v in page.items] == ["from bob"]

    def test_sort_by_views_ascending(self, db, make_user, make_video):
        owner = make_user("creator")
        for views in (50, 5, 500):
            make_video(owner, title=f"{views} views", views=views)

        page = feeds.video_feed(db, PageParams(), sort_by="views", sort_type="asc")
        assert [v["views"] for v in page.items] == [5, 50, 500]

    def test_invalid_sort(self, db):
        with pytest.raises(InvalidArgument):
            feeds.video_feed(db, PageParams(), sort_by="password_hash")
        with pytest.raises(InvalidArgument):
            feeds.video_feed(db, PageParams(), sort_type="sideways")


class TestChannelProfile:
    """Test channel pages."""

    def test_unknown_username(self, db):
        with pytest.raises(NotFound):
            feeds.channel_profile(db, "nobody")

    def test_empty_username(self, db):
        with pytest.raises(InvalidArgument):
            feeds.channel_profile(db, "   ")

    def test_counts_and_subscription_flag(self, db, make_user):
        alice = make_user("alice")
        bob = make_user("bob")
        carol = make_user("carol")
        toggles.toggle_subscription(db, bob.id, alice.id)
        toggles.toggle_subscription(db, carol.id, alice.id)
        toggles.toggle_subscription(db, alice.id, bob.id)

        profile = feeds.channel_profile(db, "  Alice ", viewer_id=bob.id)

        assert profile["id"] == alice.id
        assert profile["subscribers_count"] == 2
        assert profile["channels_subscribed_to_count"] == 1
        assert profile["is_subscribed"] is True
        assert "password_hash" not in profile
        assert "refresh_token" not in profile

    def test_not_subscribed_without_viewer(self, db, make_user):
        make_user("alice")
        assert feeds.channel_profile(db, "alice")["is_subscribed"] is False


class TestSubscriptionViews:
    """Test subscriber and subscribed-channel lists."""

    def test_channel_subscribers(self, db, make_user):
        alice = make_user("alice")
        for name in ("bob", "carol"):
            toggles.toggle_subscription(db, make_user(name).id, alice.id)

        page = feeds.channel_subscribers(db, alice.id, PageParams())
        assert page.total_items == 2
        assert {item["subscriber"]["username"] for item in page.items} == {"bob", "carol"}

    def test_subscribers_of_unknown_channel(self, db):
        with pytest.raises(NotFound):
            feeds.channel_subscribers(db, str(uuid.uuid4()), PageParams())

    def test_subscribed_channels_with_latest_video(self, db, make_user, make_video):
        viewer = make_user("viewer")
        busy = make_user("busy")
        quiet = make_user("quiet")
        make_video(busy, title="older", age_minutes=30)
        make_video(busy, title="newest", age_minutes=1)
        make_video(busy, title="unreleased", is_published=False)
        toggles.toggle_subscription(db, viewer.id, busy.id)
        toggles.toggle_subscription(db, viewer.id, quiet.id)

        page = feeds.subscribed_channels(db, viewer.id, PageParams())
        latest = {item["channel"]["username"]: item["channel"]["latest_video"] for item in page.items}

        assert page.total_items == 2
        assert latest["busy"]["title"] == "newest"
        assert latest["quiet"] is None

    def test_subscribed_channels_single_page_query(self, engine, db, make_user, make_video):
        """Latest videos for every channel on the page come back with the page itself."""
        viewer = make_user("viewer")
        for index in range(4):
            channel = make_user(f"channel{index}")
            make_video(channel, title=f"old {index}", age_minutes=10)
            make_video(channel, title=f"new {index}", age_minutes=1)
            toggles.toggle_subscription(db, viewer.id, channel.id)
        db.commit()

        statements = []

        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", record)
        try:
            page = feeds.subscribed_channels(db, viewer.id, PageParams())
        finally:
            event.remove(engine, "before_cursor_execute", record)

        titles = {item["channel"]["username"]: item["channel"]["latest_video"]["title"] for item in page.items}
        assert titles == {f"channel{index}": f"new {index}" for index in range(4)}
        # one count plus one page read
        assert len(statements) == 2


class TestLikedVideos:
    """Test the caller's liked videos."""

    def test_deleted_video_drops_out(self, db, make_user, make_video):
        """A like on a deleted video is skipped and not counted."""
        viewer = make_user("viewer")
        owner = make_user("owner")
        kept = make_video(owner, title="kept")
        doomed = make_video(owner, title="doomed")
        toggles.toggle_like(db, viewer.id, "video", kept.id)
        toggles.toggle_like(db, viewer.id, "video", doomed.id)

        assert feeds.liked_videos(db, viewer.id, PageParams()).total_items == 2

        videos.delete_video(db, doomed.id, owner.id)
        page = feeds.liked_videos(db, viewer.id, PageParams())

        assert page.total_items == 1
        assert [item["video"]["title"] for item in page.items] == ["kept"]
        # the orphaned like row itself is left in place
        assert db.query(Like).filter_by(user_id=viewer.id).count() == 2

    def test_comment_likes_are_not_listed(self, db, make_user, make_video, make_comment):
        viewer = make_user("viewer")
        video = make_video(viewer)
        comment = make_comment(video, viewer)
        toggles.toggle_like(db, viewer.id, "comment", comment.id)

        assert feeds.liked_videos(db, viewer.id, PageParams()).total_items == 0

    def test_newest_like_first(self, db, make_user, make_video):
        viewer = make_user("viewer")
        first = make_video(viewer, title="first")
        second = make_video(viewer, title="second")
        now = utcnow()
        db.add(Like(user_id=viewer.id, video_id=first.id, created_at=now - timedelta(minutes=5)))
        db.add(Like(user_id=viewer.id, video_id=second.id, created_at=now))
        db.commit()

        page = feeds.liked_videos(db, viewer.id, PageParams())
        assert [item["video"]["title"] for item in page.items] == ["second", "first"]


class TestWatchHistory:
    """Test watch history recording and listing."""

    def test_most_recently_added_first(self, db, make_user, make_video):
        viewer = make_user("viewer")
        owner = make_user("owner")
        early = make_video(owner, title="early")
        late = make_video(owner, title="late")
        now = utcnow()
        db.add(WatchHistoryEntry(user_id=viewer.id, video_id=early.id, watched_at=now - timedelta(hours=1)))
        db.add(WatchHistoryEntry(user_id=viewer.id, video_id=late.id, watched_at=now))
        db.commit()

        page = feeds.watch_history(db, viewer.id, PageParams())
        assert [item["title"] for item in page.items] == ["late", "early"]
        assert page.items[0]["owner"]["username"] == "owner"

    def test_rewatch_records_once(self, db, make_user, make_video):
        viewer = make_user("viewer")
        video = make_video(make_user("owner"))

        videos.get_video(db, video.id, viewer.id)
        videos.get_video(db, video.id, viewer.id)

        assert db.query(WatchHistoryEntry).filter_by(user_id=viewer.id).count() == 1
        assert feeds.watch_history(db, viewer.id, PageParams()).total_items == 1

    def test_deleted_video_is_skipped(self, db, make_user, make_video):
        viewer = make_user("viewer")
        owner = make_user("owner")
        video = make_video(owner)
        videos.get_video(db, video.id, viewer.id)
        videos.delete_video(db, video.id, owner.id)

        assert feeds.watch_history(db, viewer.id, PageParams()).total_items == 0

    def test_subscription_rows_do_not_leak_into_history(self, db, make_user):
        viewer = make_user("viewer")
        db.add(Subscription(subscriber_id=viewer.id, channel_id=make_user("other").id))
        db.commit()

        assert feeds.watch_history(db, viewer.id, PageParams()).items == []
