"""create submission table"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_create_submission"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "submission",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("title", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("material", sa.JSON(), nullable=True),
        sa.Column("color", sa.JSON(), nullable=True),
        sa.Column("function", sa.JSON(), nullable=True),
        sa.Column("image_urls", sa.JSON(), nullable=True),
        sa.Column("pdf_url", sa.String(length=1024), nullable=True),
        sa.Column("first_name", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("grade_level", sa.String(length=32), nullable=False, server_default=""),
    )
    op.create_index("ix_submission_created_at", "submission", ["created_at"])
    op.create_index("ix_submission_status", "submission", ["status"])


def downgrade() -> None:
    op.drop_index("ix_submission_status", table_name="submission")
    op.drop_index("ix_submission_created_at", table_name="submission")
    op.drop_table("submission")
