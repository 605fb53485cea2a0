"""Short text posts on a user's channel."""

from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidgraph.db import store_retry
from vidgraph.errors import NotFound
from vidgraph.models import Tweet, User
from vidgraph.schemas import ContentInput, parse_id
from vidgraph.services.ownership import assert_owner
from vidgraph.services.pagination import Page, PageParams
from vidgraph.services.projections import tweet_detail


def _get_owned_tweet(db: Session, tweet_id, actor_id: str, action: str) -> Tweet:
    tweet = db.get(Tweet, parse_id(tweet_id, "tweet id"))
    if tweet is None:
        raise NotFound("Tweet not found")
    assert_owner(tweet, actor_id, action)
    return tweet


def create_tweet(db: Session, owner_id: str, data: ContentInput) -> Dict[str, Any]:
    tweet = Tweet(owner_id=owner_id, content=data.content)
    db.add(tweet)
    db.flush()
    return tweet_detail(tweet, db.get(User, owner_id))


@store_retry
def list_user_tweets(db: Session, user_id, params: PageParams) -> Page:
    user_id = parse_id(user_id, "user id")
    owner = db.get(User, user_id)
    if owner is None:
        raise NotFound("User not found")

    total = db.execute(
        select(func.count()).select_from(Tweet).where(Tweet.owner_id == user_id)
    ).scalar_one()
    tweets = db.execute(
        select(Tweet)
        .where(Tweet.owner_id == user_id)
        .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).scalars().all()

    return Page(
        items=[tweet_detail(t, owner) for t in tweets],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


def update_tweet(db: Session, tweet_id, actor_id: str, data: ContentInput) -> Dict[str, Any]:
    tweet = _get_owned_tweet(db, tweet_id, actor_id, "edit")
    tweet.content = data.content
    db.flush()
    return tweet_detail(tweet, db.get(User, tweet.owner_id))


def delete_tweet(db: Session, tweet_id, actor_id: str) -> None:
    tweet = _get_owned_tweet(db, tweet_id, actor_id, "delete")
    db.delete(tweet)
    db.flush()
