"""time_windows, courts (per-window sub-resources with version counter), reservations ledger."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "time_windows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_time_windows_id", "time_windows", ["id"])
    op.create_index("ix_time_windows_start_time", "time_windows", ["start_time"], unique=True)
    op.create_index("ix_time_windows_end_time", "time_windows", ["end_time"])

    op.create_table(
        "courts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("window_id", sa.Integer(), nullable=False),
        sa.Column("court_index", sa.Integer(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("game_mode", sa.String(16), nullable=False),
        sa.Column("version", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["window_id"], ["time_windows.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("window_id", "court_index", name="uq_courts_window_index"),
    )
    op.create_index("ix_courts_id", "courts", ["id"])
    op.create_index("ix_courts_window_id", "courts", ["window_id"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("requester_id", sa.String(64), nullable=False),
        sa.Column("window_id", sa.Integer(), nullable=False),
        sa.Column("court_index", sa.Integer(), nullable=False),
        sa.Column("game_mode", sa.String(16), nullable=False),
        sa.Column("occupancy_units", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["window_id"], ["time_windows.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reservations_id", "reservations", ["id"])
    op.create_index("ix_reservations_requester_id", "reservations", ["requester_id"])
    op.create_index("ix_reservations_window_court", "reservations", ["window_id", "court_index"])
    # At most one active booking per requester per window
    op.create_index(
        "uq_reservations_active_requester_window",
        "reservations",
        ["requester_id", "window_id"],
        unique=True,
        postgresql_where=sa.text("cancelled_at IS NULL"),
        sqlite_where=sa.text("cancelled_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_reservations_active_requester_window", table_name="reservations")
    op.drop_index("ix_reservations_window_court", table_name="reservations")
    op.drop_index("ix_reservations_requester_id", table_name="reservations")
    op.drop_index("ix_reservations_id", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index("ix_courts_window_id", table_name="courts")
    op.drop_index("ix_courts_id", table_name="courts")
    op.drop_table("courts")
    op.drop_index("ix_time_windows_end_time", table_name="time_windows")
    op.drop_index("ix_time_windows_start_time", table_name="time_windows")
    op.drop_index("ix_time_windows_id", table_name="time_windows")
    op.drop_table("time_windows")
