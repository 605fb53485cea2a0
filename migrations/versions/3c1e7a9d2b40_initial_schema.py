"""initial schema

Revision ID: 3c1e7a9d2b40
Revises:
Create Date: 2026-10-17 10:12:44.108231

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e7a9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.String(length=1024), nullable=False),
        sa.Column('cover_image', sa.String(length=1024), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_full_name', 'users', ['full_name'])

    op.create_table(
        'videos',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('video_file', sa.String(length=1024), nullable=False),
        sa.Column('thumbnail', sa.String(length=1024), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('views >= 0', name='ck_videos_views_non_negative'),
    )
    op.create_index('ix_videos_owner_id', 'videos', ['owner_id'])
    op.create_index('idx_videos_published_created', 'videos', ['is_published', sa.text('created_at DESC')])
    op.create_index('idx_videos_owner_created', 'videos', ['owner_id', 'created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('video_id', sa.String(length=36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_comments_video_id', 'comments', ['video_id'])
    op.create_index('ix_comments_owner_id', 'comments', ['owner_id'])

    op.create_table(
        'tweets',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tweets_owner_id', 'tweets', ['owner_id'])

    op.create_table(
        'playlists',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_playlists_owner_id', 'playlists', ['owner_id'])

    op.create_table(
        'playlist_entries',
        sa.Column('playlist_id', sa.String(length=36), sa.ForeignKey('playlists.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('video_id', sa.String(length=36), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'watch_history',
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('video_id', sa.String(length=36), primary_key=True),
        sa.Column('watched_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_watch_history_user_watched', 'watch_history', ['user_id', 'watched_at'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('subscriber_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('channel_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscriptions_subscriber_channel'),
        sa.CheckConstraint('subscriber_id <> channel_id', name='ck_subscriptions_not_self'),
    )
    op.create_index('ix_subscriptions_subscriber_id', 'subscriptions', ['subscriber_id'])
    op.create_index('ix_subscriptions_channel_id', 'subscriptions', ['channel_id'])

    op.create_table(
        'likes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.String(length=36), nullable=True),
        sa.Column('comment_id', sa.String(length=36), nullable=True),
        sa.Column('tweet_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            '(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END'
            ' + CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END'
            ' + CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1',
            name='ck_likes_single_target',
        ),
    )
    for column in ('user_id', 'video_id', 'comment_id', 'tweet_id'):
        op.create_index(f'ix_likes_{column}', 'likes', [column])

    # One like per (user, target); each index only covers rows of its kind
    for kind in ('video', 'comment', 'tweet'):
        op.create_index(
            f'uq_likes_user_{kind}',
            'likes',
            ['user_id', f'{kind}_id'],
            unique=True,
            postgresql_where=sa.text(f'{kind}_id IS NOT NULL'),
            sqlite_where=sa.text(f'{kind}_id IS NOT NULL'),
        )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('likes')
    op.drop_table('subscriptions')
    op.drop_table('watch_history')
    op.drop_table('playlist_entries')
    op.drop_table('playlists')
    op.drop_table('tweets')
    op.drop_table('comments')
    op.drop_table('videos')
    op.drop_table('users')
