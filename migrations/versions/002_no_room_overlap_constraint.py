"""Database-level guard against double-booking a room.

EXCLUDE USING gist on (room_id, daterange(check_in, check_out, '[)')) for
every reservation that is not cancelled. The application checks
availability first; this constraint holds even when two writers race.

Revision ID: 002_no_room_overlap_constraint
Revises: 001_initial_schema
Create Date: 2026-10-19
"""

from __future__ import annotations

from pathlib import Path

from alembic import op

revision = "002_no_room_overlap_constraint"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None

_SQL_FILE = Path(__file__).resolve().parents[1] / "sql" / "002_no_room_overlap_constraint.sql"


def upgrade() -> None:
    op.execute(_SQL_FILE.read_text(encoding="utf-8"))


def downgrade() -> None:
    op.execute(
        "ALTER TABLE hostal_reservations DROP CONSTRAINT IF EXISTS hostal_reservations_no_room_overlap"
    )
