"""Booker events, attendee records and ticket history."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None


def _stamp_columns() -> list[sa.Column]:
    return [
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("verification_date", sa.Text(), nullable=True),
        sa.Column("verification_time", sa.Text(), nullable=True),
        sa.Column("verified_by", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "booker_events",
        sa.Column("organizer_uid", sa.Text(), nullable=False),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("event_name", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("event_date", sa.Text(), nullable=True),
        sa.Column("event_venue", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("organizer_uid", "event_id"),
    )

    op.create_table(
        "event_attendees",
        sa.Column("organizer_uid", sa.Text(), nullable=False),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("ticket_id", sa.Text(), nullable=False),
        sa.Column("attendee_uid", sa.Text(), nullable=True),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("ticket_type", sa.Text(), nullable=True),
        sa.Column("purchase_date", sa.Text(), nullable=True),
        sa.Column("purchase_time", sa.Text(), nullable=True),
        sa.Column("ticket_reference", sa.Text(), nullable=True),
        *_stamp_columns(),
        sa.PrimaryKeyConstraint("organizer_uid", "event_id", "ticket_id"),
        sa.ForeignKeyConstraint(
            ["organizer_uid", "event_id"],
            ["booker_events.organizer_uid", "booker_events.event_id"],
            ondelete="CASCADE",
        ),
    )

    op.create_table(
        "ticket_history",
        sa.Column("account_uid", sa.Text(), nullable=False),
        sa.Column("ticket_id", sa.Text(), nullable=False),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("event_name", sa.Text(), nullable=True),
        sa.Column("ticket_type", sa.Text(), nullable=True),
        sa.Column("ticket_reference", sa.Text(), nullable=True),
        sa.Column("purchase_date", sa.Text(), nullable=True),
        sa.Column("purchase_time", sa.Text(), nullable=True),
        *_stamp_columns(),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("account_uid", "ticket_id"),
    )


def downgrade() -> None:
    op.drop_table("ticket_history")
    op.drop_table("event_attendees")
    op.drop_table("booker_events")
