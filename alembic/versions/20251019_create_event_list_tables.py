"""Create users, events and participants tables

Revision ID: 20251019_create_event_list_tables
Revises:
Create Date: 2025-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20251019_create_event_list_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column("user_name", sa.String(255), nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("host_id", sa.String(255), primary_key=True),
        sa.Column("event_name", sa.String(255), primary_key=True),
        sa.Column("date", sa.String(255), nullable=False),
        sa.Column("deadline", sa.String(255), nullable=False),
        sa.Column("location", sa.String(512), nullable=False),
        sa.Column("members_max", sa.Integer, nullable=True),
        sa.Column("lottery", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("description", sa.String(1024), nullable=True),
    )

    op.create_table(
        "participants",
        sa.Column("host_id", sa.String(255), primary_key=True),
        sa.Column("event_name", sa.String(255), primary_key=True),
        sa.Column("participant_id", sa.String(255), primary_key=True),
    )

    op.create_foreign_key(
        "fk_participants_event",
        "participants",
        "events",
        ["host_id", "event_name"],
        ["host_id", "event_name"],
        ondelete="CASCADE",
    )
    op.create_foreign_key(
        "fk_participants_user",
        "participants",
        "users",
        ["participant_id"],
        ["user_id"],
    )

    # Listing orders
    op.create_index("ix_users_user_name", "users", ["user_name"])
    op.create_index("ix_participants_participant_id", "participants", ["participant_id"])


def downgrade() -> None:
    op.drop_index("ix_participants_participant_id", table_name="participants")
    op.drop_index("ix_users_user_name", table_name="users")

    op.drop_constraint("fk_participants_user", "participants", type_="foreignkey")
    op.drop_constraint("fk_participants_event", "participants", type_="foreignkey")

    op.drop_table("participants")
    op.drop_table("events")
    op.drop_table("users")
