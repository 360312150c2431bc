"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-05-12 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from playerduo.db.types import StringListType
from playerduo.models.enums import (
    PaymentStatus, PaymentType, PaymentMethod, OrderStatus, GamePlayerStatus, MomentStatus, ReportStatus,
)

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100)),
        sa.Column("phone_number", sa.String(20)),
        sa.Column("address", sa.String(255)),
        sa.Column("bio", sa.Text()),
        sa.Column("gender", sa.String(20)),
        sa.Column("avatar_url", sa.String(500)),
        sa.Column("cover_image_url", sa.String(500)),
        sa.Column("coin", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("roles", StringListType(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("account_non_locked", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_active_at", sa.DateTime()),
        sa.Column("device_token", sa.String(500)),
        *_timestamps(),
        sa.CheckConstraint("coin >= 0", name="ck_users_coin_non_negative"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("token", sa.String(100), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_password_reset_tokens_token", "password_reset_tokens", ["token"], unique=True)
    op.create_index("ix_password_reset_tokens_user_id", "password_reset_tokens", ["user_id"])

    op.create_table(
        "user_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("blocker_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("blocked_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blocks_pair"),
    )
    op.create_index("ix_user_blocks_blocker_id", "user_blocks", ["blocker_id"])
    op.create_index("ix_user_blocks_blocked_id", "user_blocks", ["blocked_id"])

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(50)),
        sa.Column("platform", sa.String(50)),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("image_url", sa.String(500)),
        sa.Column("website_url", sa.String(500)),
        sa.Column("requirements", sa.Text()),
        sa.Column("has_roles", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("available_roles", StringListType(), nullable=False),
        sa.Column("available_ranks", StringListType(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "game_players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("rank", sa.String(50)),
        sa.Column("role", sa.String(50)),
        sa.Column("server", sa.String(50)),
        sa.Column("description", sa.Text()),
        sa.Column("price_per_hour", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.Enum(GamePlayerStatus, name="gameplayerstatus"), nullable=False),
        sa.Column("hired_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("hire_date", sa.DateTime()),
        sa.Column("return_date", sa.DateTime()),
        sa.Column("total_hours", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_game_players_user_id", "game_players", ["user_id"])
    op.create_index("ix_game_players_game_id", "game_players", ["game_id"])

    op.create_table(
        "player_follows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("follower_id", "game_player_id", name="uq_player_follows_pair"),
    )
    op.create_index("ix_player_follows_follower_id", "player_follows", ["follower_id"])
    op.create_index("ix_player_follows_game_player_id", "player_follows", ["game_player_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="SET NULL")),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("coin", sa.BigInteger(), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("status", sa.Enum(PaymentStatus, name="paymentstatus"), nullable=False),
        sa.Column("payment_method", sa.Enum(PaymentMethod, name="paymentmethod"), nullable=False),
        sa.Column("type", sa.Enum(PaymentType, name="paymenttype"), nullable=False),
        sa.Column("transaction_id", sa.String(100)),
        sa.Column("vnp_txn_ref", sa.String(100), unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("start_time", sa.DateTime()),
        sa.Column("end_time", sa.DateTime()),
        *_timestamps(),
        sa.CheckConstraint("coin > 0", name="ck_payments_coin_positive"),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_game_player_id", "payments", ["game_player_id"])
    op.create_index("ix_payments_player_id", "payments", ["player_id"])
    op.create_index("ix_payments_created_at", "payments", ["created_at"])
    op.create_index("ix_payments_user_type", "payments", ["user_id", "type"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_id", sa.Integer(), sa.ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("renter_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hours", sa.Integer(), nullable=False),
        sa.Column("total_coin", sa.BigInteger(), nullable=False),
        sa.Column("message", sa.Text()),
        sa.Column("status", sa.Enum(OrderStatus, name="orderstatus"), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_orders_renter_id", "orders", ["renter_id"])
    op.create_index("ix_orders_game_player_id", "orders", ["game_player_id"])

    op.create_table(
        "player_reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_player_reviews_rating_range"),
    )
    op.create_index("ix_player_reviews_game_player_id", "player_reviews", ["game_player_id"])
    op.create_index("ix_player_reviews_user_id", "player_reviews", ["user_id"])

    op.create_table(
        "moments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.Enum(MomentStatus, name="momentstatus"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_moments_game_player_id", "moments", ["game_player_id"])
    op.create_index("ix_moments_created_at", "moments", ["created_at"])

    op.create_table(
        "moment_images",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("moment_id", sa.Integer(), sa.ForeignKey("moments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
    )
    op.create_index("ix_moment_images_moment_id", "moment_images", ["moment_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("action_url", sa.String(500)),
        sa.Column("reference_id", sa.Integer()),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("reported_player_id", sa.Integer(), sa.ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reporter_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("video", sa.String(500)),
        sa.Column("status", sa.Enum(ReportStatus, name="reportstatus"), nullable=False),
        sa.Column("resolution", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("resolved_at", sa.DateTime()),
    )
    op.create_index("ix_reports_reported_player_id", "reports", ["reported_player_id"])
    op.create_index("ix_reports_reporter_id", "reports", ["reporter_id"])
    op.create_index("ix_reports_status", "reports", ["status"])


def downgrade() -> None:
    for table in (
        "reports", "notifications", "moment_images", "moments", "player_reviews", "orders", "payments",
        "player_follows", "game_players", "games", "user_blocks", "password_reset_tokens", "users",
    ):
        op.drop_table(table)
    bind = op.get_bind()
    for enum_name in (
        "reportstatus", "momentstatus", "orderstatus", "paymenttype", "paymentmethod", "paymentstatus", "gameplayerstatus",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
