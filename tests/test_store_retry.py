"""
Tests for retrying read paths on transient store failures.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from vidgraph.config import DB_RETRY_ATTEMPTS
from vidgraph.db import store_retry
from vidgraph.errors import NotFound, StoreUnavailable
from vidgraph.services import feeds
from vidgraph.services.pagination import PageParams


def _dropped_connection():
    return OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))


class TestStoreRetry:
    """Test the retry wrapper around read paths."""

    def test_gives_up_with_store_unavailable(self):
        session = MagicMock(spec=Session)
        calls = []

        @store_retry
        def read(db):
            calls.append(1)
            raise _dropped_connection()

        with pytest.raises(StoreUnavailable) as exc_info:
            read(session)

        assert len(calls) == DB_RETRY_ATTEMPTS
        assert session.rollback.call_count == DB_RETRY_ATTEMPTS
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_recovers_after_transient_failure(self):
        outcomes = [_dropped_connection(), "rows"]

        @store_retry
        def read(db):
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert read(MagicMock(spec=Session)) == "rows"

    def test_domain_errors_are_not_retried(self):
        calls = []

        @store_retry
        def read(db):
            calls.append(1)
            raise NotFound("Video not found")

        with pytest.raises(NotFound):
            read(MagicMock(spec=Session))
        assert len(calls) == 1

    def test_feed_surfaces_store_unavailable(self):
        session = MagicMock(spec=Session)
        session.execute.side_effect = _dropped_connection()

        with pytest.raises(StoreUnavailable):
            feeds.video_feed(session, PageParams())

        assert session.execute.call_count == DB_RETRY_ATTEMPTS
