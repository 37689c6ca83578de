"""Create users, content and social interaction tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: users, code_snippets, pages, friendships, likes,
       comments, user_tags.

Constraints carried by the schema rather than by service code alone:
    uq_friendships_pair         one edge per unordered user pair
    ck_friendships_not_self     no self-friendship
    ck_friendships_pair_order   pair key stored as (low, high)
    ck_friendships_pair_matches pair key holds the edge's own two users
    ck_likes_one_target         a like points at a snippet or a page, not both
    uq_likes_user_snippet       one like per user and snippet
    uq_likes_user_page          one like per user and page

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _user_fk(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), **kwargs)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(150), nullable=False, unique=True),
        sa.Column("first_name", sa.String(150), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(150), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        _created_at(),
    )
    # Case-insensitive username lookups (user directory)
    op.create_index("ix_users_username_lower", "users", [sa.text("lower(username)")])

    op.create_table(
        "code_snippets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("code_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("programming_language", sa.String(50), nullable=True),
        _user_fk("created_by_id", nullable=False),
        _created_at(),
    )
    op.create_index("ix_code_snippets_created_by_id", "code_snippets", ["created_by_id"])

    op.create_table(
        "pages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _user_fk("created_by_id", nullable=False),
        _created_at(),
    )
    op.create_index("ix_pages_created_by_id", "pages", ["created_by_id"])

    op.create_table(
        "friendships",
        _user_fk("requester_id", primary_key=True),
        _user_fk("addressee_id", primary_key=True),
        sa.Column("user_low_id", sa.Uuid(), nullable=False),
        sa.Column("user_high_id", sa.Uuid(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "accepted", "declined", "blocked",
                name="friendship_status",
                native_enum=False,
                length=20,
            ),
            nullable=False,
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        sa.CheckConstraint("requester_id <> addressee_id", name="ck_friendships_not_self"),
        sa.CheckConstraint("user_low_id < user_high_id", name="ck_friendships_pair_order"),
        sa.CheckConstraint(
            "(user_low_id = requester_id AND user_high_id = addressee_id)"
            " OR (user_low_id = addressee_id AND user_high_id = requester_id)",
            name="ck_friendships_pair_matches",
        ),
    )
    op.create_index("ix_friendships_addressee_status", "friendships", ["addressee_id", "status"])

    op.create_table(
        "likes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk("user_id", nullable=False),
        sa.Column(
            "code_snippet_id",
            sa.Integer(),
            sa.ForeignKey("code_snippets.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "page_id",
            sa.Integer(),
            sa.ForeignKey("pages.id", ondelete="CASCADE"),
            nullable=True,
        ),
        _created_at(),
        sa.CheckConstraint(
            "(code_snippet_id IS NULL) <> (page_id IS NULL)",
            name="ck_likes_one_target",
        ),
        sa.UniqueConstraint("user_id", "code_snippet_id", name="uq_likes_user_snippet"),
        sa.UniqueConstraint("user_id", "page_id", name="uq_likes_user_page"),
    )
    op.create_index("ix_likes_code_snippet_id", "likes", ["code_snippet_id"])
    op.create_index("ix_likes_page_id", "likes", ["page_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("content", sa.String(1000), nullable=False),
        _user_fk("created_by_id", nullable=False),
        sa.Column(
            "code_snippet_id",
            sa.Integer(),
            sa.ForeignKey("code_snippets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_comments_snippet_created", "comments", ["code_snippet_id", "created_at"])

    op.create_table(
        "user_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk("tagged_user_id", nullable=False),
        _user_fk("tagger_id", nullable=False),
        sa.Column(
            "code_snippet_id",
            sa.Integer(),
            sa.ForeignKey("code_snippets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_user_tags_tagged_user_id", "user_tags", ["tagged_user_id"])
    op.create_index("ix_user_tags_snippet_created", "user_tags", ["code_snippet_id", "created_at"])


def downgrade() -> None:
    for table in ("user_tags", "comments", "likes", "friendships", "pages", "code_snippets"):
        op.drop_table(table)
    op.drop_index("ix_users_username_lower", table_name="users")
    op.drop_table("users")
