"""init all tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

# Enums
source_type_enum = sa.Enum("repository", "blog", "paper", "news", name="sourcetype")
tag_category_enum = sa.Enum(
    "framework", "application", "technology", "industry", name="tagcategory"
)
tag_source_enum = sa.Enum("auto", "manual", "ai", name="tagsource")
job_type_enum = sa.Enum(
    "fetch", "classify", "update_metrics", "cleanup", name="jobtype"
)
job_status_enum = sa.Enum("pending", "running", "completed", "failed", name="jobstatus")


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    ]


def upgrade() -> None:
    # Data sources table
    op.create_table(
        "data_sources",
        *_base_columns(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", source_type_enum, nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("base_url", sa.Text(), nullable=True),
        sa.Column("api_config", sa.JSON(), nullable=False),
        sa.Column("update_frequency_hours", sa.Integer(), nullable=False, server_default="24"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_data_sources_name", "data_sources", ["name"], unique=True)
    op.create_index("ix_data_sources_type", "data_sources", ["type"])
    op.create_index("ix_data_sources_is_active", "data_sources", ["is_active"])

    # Items table
    op.create_table(
        "items",
        *_base_columns(),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("author_name", sa.String(), nullable=False, server_default=""),
        sa.Column("author_url", sa.Text(), nullable=True),
        sa.Column("author_avatar_url", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("popularity_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("metric_primary", sa.Float(), nullable=False, server_default="0"),
        sa.Column("metric_secondary", sa.Float(), nullable=True),
        sa.Column("metric_engagement", sa.Float(), nullable=True),
        sa.Column("primary_category", sa.String(), nullable=False, server_default="other"),
        sa.Column("language", sa.String(), nullable=True),
        sa.Column("trending_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_metadata", sa.JSON(), nullable=False),
        sa.Column("raw_data", sa.JSON(), nullable=True),
        sa.UniqueConstraint("source_id", "external_id", name="uq_items_source_external"),
    )
    op.create_index("ix_items_source_id", "items", ["source_id"])
    op.create_index("ix_items_popularity_score", "items", ["popularity_score"])
    op.create_index("ix_items_primary_category", "items", ["primary_category"])
    op.create_index("ix_items_language", "items", ["language"])
    op.create_index("ix_items_trending_date", "items", ["trending_date"])

    # Tags table
    op.create_table(
        "tags",
        *_base_columns(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("category", tag_category_enum, nullable=False),
        sa.Column("parent_id", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(), nullable=False, server_default="#6B7280"),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_tags_name", "tags", ["name"], unique=True)
    op.create_index("ix_tags_category", "tags", ["category"])

    # Item tags table
    op.create_table(
        "item_tags",
        *_base_columns(),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("tag_id", sa.String(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("source", tag_source_enum, nullable=False),
        sa.UniqueConstraint("item_id", "tag_id", name="uq_item_tags_item_tag"),
    )
    op.create_index("ix_item_tags_item_id", "item_tags", ["item_id"])
    op.create_index("ix_item_tags_tag_id", "item_tags", ["tag_id"])

    # Processing jobs table
    op.create_table(
        "processing_jobs",
        *_base_columns(),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("job_type", job_type_enum, nullable=False),
        sa.Column("status", job_status_enum, nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("items_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_retries", sa.Integer(), nullable=False, server_default="3"),
    )
    op.create_index("ix_processing_jobs_source_id", "processing_jobs", ["source_id"])
    op.create_index("ix_processing_jobs_status", "processing_jobs", ["status"])


def downgrade() -> None:
    op.drop_table("processing_jobs")
    op.drop_table("item_tags")
    op.drop_table("tags")
    op.drop_table("items")
    op.drop_table("data_sources")

    # Drop enums
    job_status_enum.drop(op.get_bind(), checkfirst=True)
    job_type_enum.drop(op.get_bind(), checkfirst=True)
    tag_source_enum.drop(op.get_bind(), checkfirst=True)
    tag_category_enum.drop(op.get_bind(), checkfirst=True)
    source_type_enum.drop(op.get_bind(), checkfirst=True)
