"""initial lifecycle schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

import sqlalchemy as sa
from alembic import op

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _enum(*values: str, name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def upgrade() -> None:
    op.create_table(
        "stores",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "engine", _enum("woocommerce", "medusa", name="storeengine"), nullable=False
        ),
        sa.Column(
            "plan", _enum("basic", "standard", "premium", name="storeplan"), nullable=False
        ),
        sa.Column(
            "status",
            _enum(
                "pending",
                "provisioning",
                "running",
                "failed",
                "deleting",
                "deleted",
                name="storestatus",
            ),
            nullable=False,
        ),
        sa.Column("status_message", sa.Text(), nullable=True),
        sa.Column("namespace", sa.String(length=63), nullable=True),
        sa.Column("helm_release", sa.String(length=53), nullable=True),
        sa.Column("url", sa.String(length=255), nullable=True),
        sa.Column("admin_url", sa.String(length=255), nullable=True),
        sa.Column("admin_username", sa.String(length=64), nullable=True),
        sa.Column("admin_password_secret", sa.String(length=253), nullable=True),
        sa.Column("created_by", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_stores_engine", "stores", ["engine"])
    op.create_index("ix_stores_status", "stores", ["status"])
    op.create_index("ix_stores_created_at", "stores", ["created_at"])
    op.create_index(
        "uq_stores_name_active",
        "stores",
        ["name"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
        sqlite_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "store_jobs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "store_id",
            sa.String(length=36),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("job_type", _enum("provision", "delete", name="jobtype"), nullable=False),
        sa.Column(
            "status",
            _enum("pending", "running", "completed", "failed", name="jobstatus"),
            nullable=False,
        ),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("current_step", sa.String(length=255), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_store_jobs_store_type_status", "store_jobs", ["store_id", "job_type", "status"]
    )
    op.create_index("ix_store_jobs_status_updated", "store_jobs", ["status", "updated_at"])

    op.create_table(
        "store_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "store_id",
            sa.String(length=36),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "event_type",
            _enum(
                "provisioning_started",
                "provisioning_completed",
                "provisioning_failed",
                "deletion_started",
                "deletion_completed",
                "deletion_failed",
                name="eventtype",
            ),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_store_events_store_created", "store_events", ["store_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_store_events_store_created", table_name="store_events")
    op.drop_table("store_events")
    op.drop_index("ix_store_jobs_status_updated", table_name="store_jobs")
    op.drop_index("ix_store_jobs_store_type_status", table_name="store_jobs")
    op.drop_table("store_jobs")
    op.drop_index("uq_stores_name_active", table_name="stores")
    op.drop_index("ix_stores_created_at", table_name="stores")
    op.drop_index("ix_stores_status", table_name="stores")
    op.drop_index("ix_stores_engine", table_name="stores")
    op.drop_table("stores")
