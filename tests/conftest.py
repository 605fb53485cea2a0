"""Shared fixtures: an in-memory SQLite store and entity factories."""

import os
from datetime import timedelta

# Must be set before anything imports vidgraph.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_RETRY_MIN_WAIT"] = "0"
os.environ["DB_RETRY_MAX_WAIT"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import vidgraph.db
from vidgraph.models import Base, Comment, Playlist, Tweet, User, Video, utcnow
from vidgraph.services.passwords import hash_password

PASSWORD = "s3cret-pass"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def password():
    """Plain-text password of every user built by make_user."""
    return PASSWORD


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions over a file-backed SQLite store, one connection per session."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'vidgraph.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    """Point get_session() at the test engine."""
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    monkeypatch.setattr(vidgraph.db, "SessionLocal", factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from vidgraph.main import app

    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Create and commit a user; usernames must be unique per test."""

    def _make(username="alice", full_name=None, email=None):
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            full_name=full_name or username.title(),
            avatar=f"https://img.example.com/{username}.png",
            cover_image="",
            password_hash=PASSWORD_HASH,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_video(db):
    """Create and commit a video; ``age_minutes`` backdates it."""

    def _make(owner, title="A video", description="Some description", views=0,
              duration=60.0, is_published=True, age_minutes=0):
        created = utcnow() - timedelta(minutes=age_minutes)
        video = Video(
            owner_id=owner.id,
            title=title,
            description=description,
            video_file="https://cdn.example.com/v.mp4",
            thumbnail="https://cdn.example.com/t.png",
            duration=duration,
            views=views,
            is_published=is_published,
            created_at=created,
            updated_at=created,
        )
        db.add(video)
        db.commit()
        return video

    return _make


@pytest.fixture
def make_comment(db):
    def _make(video, owner, content="Nice video"):
        comment = Comment(video_id=video.id, owner_id=owner.id, content=content)
        db.add(comment)
        db.commit()
        return comment

    return _make


@pytest.fixture
def make_tweet(db):
    def _make(owner, content="Hello world"):
        tweet = Tweet(owner_id=owner.id, content=content)
        db.add(tweet)
        db.commit()
        return tweet

    return _make


@pytest.fixture
def make_playlist(db):
    def _make(owner, name="Favourites", is_public=True):
        playlist = Playlist(owner_id=owner.id, name=name, description="", is_public=is_public)
        db.add(playlist)
        db.commit()
        return playlist

    return _make


@pytest.fixture
def count_rows(db):
    """Count rows of a model, optionally filtered by column equality."""

    def _count(model, **filters):
        return db.query(model).filter_by(**filters).count()

    return _count

