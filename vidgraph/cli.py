# vidgraph/cli.py
from typing import Optional

import typer
from sqlalchemy import select

from vidgraph.db import get_session
from vidgraph.errors import VidgraphError
from vidgraph.models import User
from vidgraph.services import seeder
from vidgraph.services.dashboard import get_channel_analytics, get_channel_stats
from vidgraph.services.feeds import channel_profile, video_feed
from vidgraph.services.pagination import PageParams
from vidgraph.services.toggles import toggle_like

app = typer.Typer(help="vidgraph CLI with subcommands")


def _user_id(db, username: str) -> str:
    user_id = db.execute(select(User.id).where(User.username == username.strip().lower())).scalar()
    if user_id is None:
        typer.echo(f"❌ No user named {username!r}", err=True)
        raise typer.Exit(1)
    return user_id


@app.command("seed")
def seed_cmd(
    users: int = typer.Option(200, help="Number of users"),
    videos: int = typer.Option(1000, help="Number of videos"),
    tweets: int = typer.Option(500, help="Number of tweets"),
    password: str = typer.Option("password", help="Password given to every seeded account"),
):
    """Populate the database with mock data."""
    # Set deterministic seeds for reproducible data
    seeder.seed_random_generators()

    with get_session() as db:
        us = seeder.make_users(db, users, password=password)
        vs = seeder.make_videos(db, us, videos)
        cs = seeder.make_comments(db, vs, us)
        ts = seeder.make_tweets(db, us, tweets)
        subs = seeder.make_subscriptions(db, us)
        likes = seeder.make_likes(db, us, vs, cs, ts)
        pls = seeder.make_playlists(db, us, vs)
        watched = seeder.make_watch_history(db, us, vs)
    typer.echo(
        f"Seed complete: users={users}, videos={videos}, comments={len(cs)}, tweets={tweets}, "
        f"subscriptions={subs}, likes={likes}, playlists={len(pls)}, history={watched}"
    )


@app.command("feed")
def feed_cmd(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search title and description"),
    sort_by: str = typer.Option("created_at", "--sort-by", help="created_at, views, duration or title"),
    sort_type: str = typer.Option("desc", "--sort-type", help="asc or desc"),
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(10, "--limit", "-l", min=1, max=100),
):
    """List published videos."""
    try:
        with get_session() as db:
            result = video_feed(db, PageParams(page=page, limit=limit), query=query, sort_by=sort_by, sort_type=sort_type)
    except VidgraphError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    if not result.items:
        typer.echo("No videos found")
        return

    typer.echo(f"\n🎬 Videos (page {result.current_page}/{result.total_pages}, {result.total_items:,} total):")
    typer.echo("─" * 70)
    for i, video in enumerate(result.items, start=(page - 1) * limit + 1):
        owner = video["owner"]["username"] if video.get("owner") else "?"
        typer.echo(f"{i:3d}. {video['title'][:40]:<40} @{owner:<15} {video['views']:>8,} views")
    if result.has_next_page:
        typer.echo(f"\nMore results: --page {page + 1}")


@app.command("channel")
def channel_cmd(username: str = typer.Argument(..., help="Channel username")):
    """Show a channel profile."""
    try:
        with get_session() as db:
            profile = channel_profile(db, username)
    except VidgraphError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n📺 {profile['full_name']} (@{profile['username']})")
    typer.echo("─" * 40)
    typer.echo(f"Subscribers:      {profile['subscribers_count']:,}")
    typer.echo(f"Subscribed to:    {profile['channels_subscribed_to_count']:,}")


@app.command("dashboard")
def dashboard_cmd(
    username: str = typer.Argument(..., help="Channel username"),
    days: int = typer.Option(30, "--days", "-d", help="Analytics window (1-365)", min=1, max=365),
):
    """Show channel totals and trailing-window engagement."""
    try:
        with get_session() as db:
            owner_id = _user_id(db, username)
            stats = get_channel_stats(db, owner_id)
            analytics = get_channel_analytics(db, owner_id, days)
    except VidgraphError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n📊 Dashboard for @{username}:")
    typer.echo("─" * 40)
    typer.echo(f"Videos:           {stats['total_videos']:,}")
    typer.echo(f"Views:            {stats['total_views']:,}")
    typer.echo(f"Subscribers:      {stats['total_subscribers']:,}")
    typer.echo(f"Likes:            {stats['total_likes']:,}")
    typer.echo(f"Playlists:        {stats['total_playlists']:,}")

    metrics = analytics["engagement_metrics"]
    typer.echo(f"\nLast {days} days:")
    typer.echo(f"Views:            {metrics['total_views']:,}")
    typer.echo(f"Likes:            {metrics['total_likes']:,}")
    typer.echo(f"Avg views/video:  {metrics['avg_views_per_video']:.1f}")
    typer.echo(f"Avg likes/video:  {metrics['avg_likes_per_video']:.1f}")


@app.command("toggle-like")
def toggle_like_cmd(
    username: str = typer.Argument(..., help="User who likes"),
    kind: str = typer.Argument(..., help="video, comment or tweet"),
    target_id: str = typer.Argument(..., help="Id of the liked entity"),
):
    """Like or unlike a video, comment or tweet on behalf of a user."""
    try:
        with get_session() as db:
            result = toggle_like(db, _user_id(db, username), kind, target_id)
    except VidgraphError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    state = "liked" if result.active else "unliked"
    typer.echo(f"✓ @{username} {state} {result.target_kind} {result.target_id}")


if __name__ == "__main__":
    app()
