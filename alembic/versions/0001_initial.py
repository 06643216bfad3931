"""initial schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "programs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("program_code", sa.String(length=120), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("university", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=40), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("faculty", sa.String(length=255), nullable=False),
        sa.Column("program_name", sa.String(length=255), nullable=False),
        sa.Column("aps_required", sa.Integer(), nullable=False),
        sa.Column("duration", sa.String(length=60), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subject_requirements", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("aps_required >= 0 and aps_required <= 42", name="ck_programs_aps_required"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("program_code"),
    )
    op.create_index("ix_programs_active", "programs", ["active"], unique=False)
    op.create_index("ix_programs_abbreviation", "programs", ["abbreviation"], unique=False)

    op.create_table(
        "eligibility_checks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("program_code", sa.String(length=120), nullable=True),
        sa.Column("total_aps", sa.Integer(), nullable=False),
        sa.Column("is_eligible", sa.Boolean(), nullable=False),
        sa.Column("inputs_json", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("results_json", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_eligibility_checks_program_code", "eligibility_checks", ["program_code"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_eligibility_checks_program_code", table_name="eligibility_checks")
    op.drop_table("eligibility_checks")
    op.drop_index("ix_programs_abbreviation", table_name="programs")
    op.drop_index("ix_programs_active", table_name="programs")
    op.drop_table("programs")
