"""order version column, audit idempotency, dead letters and login counters

Revision ID: 0002_order_consistency
Revises: 0001_backoffice_schema
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_order_consistency"
down_revision = "0001_backoffice_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("orders", sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")))

    op.add_column("order_history", sa.Column("operation_id", sa.String(length=36), nullable=True))
    op.execute("UPDATE order_history SET operation_id = 'legacy-' || id WHERE operation_id IS NULL")
    with op.batch_alter_table("order_history") as batch_op:
        batch_op.alter_column("operation_id", existing_type=sa.String(length=36), nullable=False)
        batch_op.create_unique_constraint("uq_order_history_operation_id", ["operation_id"])

    op.create_table(
        "audit_dead_letters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("operation_id", sa.String(length=36), nullable=False, unique=True),
        sa.Column("order_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("employee_role", sa.String(length=32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_audit_dead_letters_order_id", "audit_dead_letters", ["order_id"])

    op.create_table(
        "login_attempts",
        sa.Column("key", sa.String(length=255), primary_key=True),
        sa.Column("count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("window_started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_attempt_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("login_attempts")

    op.drop_index("ix_audit_dead_letters_order_id", table_name="audit_dead_letters")
    op.drop_table("audit_dead_letters")

    with op.batch_alter_table("order_history") as batch_op:
        batch_op.drop_constraint("uq_order_history_operation_id", type_="unique")
        batch_op.drop_column("operation_id")

    op.drop_column("orders", "version")
