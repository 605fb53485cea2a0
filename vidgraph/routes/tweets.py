"""Channel text posts."""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.schemas import ContentInput
from vidgraph.services import tweets
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/tweets", tags=["tweets"])


@router.post("/", status_code=201)
def create_tweet(body: ContentInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        tweet = tweets.create_tweet(db, user_id, body)
    return envelope(tweet, "Tweet created successfully", 201)


@router.get("/user/{owner_id}")
def list_user_tweets(
    owner_id: str = Path(...),
    params: PageParams = Depends(page_params),
    _: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        page = tweets.list_user_tweets(db, owner_id, params)
    return envelope(page.to_dict(), "Tweets fetched successfully")


@router.patch("/{tweet_id}")
def update_tweet(
    body: ContentInput,
    tweet_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        tweet = tweets.update_tweet(db, tweet_id, user_id, body)
    return envelope(tweet, "Tweet updated successfully")


@router.delete("/{tweet_id}")
def delete_tweet(tweet_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        tweets.delete_tweet(db, tweet_id, user_id)
    return envelope({}, "Tweet deleted successfully")
