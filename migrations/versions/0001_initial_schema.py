"""Initial schema: users, projects, feedback items, votes, comments, waitlist"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("image", sa.String(length=1024), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
    )
    op.create_index("uq_users_lower_email", "users", [sa.text("lower(email)")], unique=True)

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("domain", sa.String(length=253), nullable=False),
        sa.Column("api_key", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
    )
    op.create_index("ix_projects_api_key", "projects", ["api_key"], unique=True)
    op.create_index("ix_projects_user_id", "projects", ["user_id"])

    op.create_table(
        "feedback_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.CheckConstraint("type IN ('feature','bug','improvement')", name="ck_feedback_items_type_valid"),
        sa.CheckConstraint("status IN ('open','in-progress','closed')", name="ck_feedback_items_status_valid"),
        sa.CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_feedback_items_counters_nonneg"),
    )
    op.create_index("ix_feedback_items_project_id", "feedback_items", ["project_id"])
    op.create_index("ix_feedback_items_user_id", "feedback_items", ["user_id"])
    op.create_index("ix_feedback_items_project_created_at", "feedback_items", ["project_id", "created_at"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("feedback_item_id", sa.Integer(), sa.ForeignKey("feedback_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vote_type", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.UniqueConstraint("user_id", "feedback_item_id", name="uq_votes_user_item"),
        sa.CheckConstraint("vote_type IN ('upvote','downvote')", name="ck_votes_type_valid"),
    )
    op.create_index("ix_votes_feedback_item_id", "votes", ["feedback_item_id"])
    op.create_index("ix_votes_user_id", "votes", ["user_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("feedback_item_id", sa.Integer(), sa.ForeignKey("feedback_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("user_name", sa.String(length=100), nullable=True),
        sa.Column("user_email", sa.String(length=255), nullable=True),
        sa.Column("parent_comment_id", sa.Integer(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("is_moderated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
    )
    op.create_index("ix_comments_feedback_item_id", "comments", ["feedback_item_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index("ix_comments_parent_comment_id", "comments", ["parent_comment_id"])
    op.create_index(
        "ix_comments_item_parent_created_at",
        "comments",
        ["feedback_item_id", "parent_comment_id", "created_at"],
    )

    op.create_table(
        "waitlist_registrations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
    )
    op.create_index("ix_waitlist_registrations_created_at", "waitlist_registrations", ["created_at", "id"])


def downgrade():
    op.drop_index("ix_waitlist_registrations_created_at", table_name="waitlist_registrations")
    op.drop_table("waitlist_registrations")

    op.drop_index("ix_comments_item_parent_created_at", table_name="comments")
    op.drop_index("ix_comments_parent_comment_id", table_name="comments")
    op.drop_index("ix_comments_user_id", table_name="comments")
    op.drop_index("ix_comments_feedback_item_id", table_name="comments")
    op.drop_table("comments")

    op.drop_index("ix_votes_user_id", table_name="votes")
    op.drop_index("ix_votes_feedback_item_id", table_name="votes")
    op.drop_table("votes")

    op.drop_index("ix_feedback_items_project_created_at", table_name="feedback_items")
    op.drop_index("ix_feedback_items_user_id", table_name="feedback_items")
    op.drop_index("ix_feedback_items_project_id", table_name="feedback_items")
    op.drop_table("feedback_items")

    op.drop_index("ix_projects_user_id", table_name="projects")
    op.drop_index("ix_projects_api_key", table_name="projects")
    op.drop_table("projects")

    op.drop_index("uq_users_lower_email", table_name="users")
    op.drop_table("users")
