"""initial schema: runs, snapshots, bot_teams, battles

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "runs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("stage", sa.Integer(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "won", "lost", "abandoned", name="runstatus"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_runs_player_id"), "runs", ["player_id"], unique=False)
    op.create_index("ix_runs_player_id_status", "runs", ["player_id", "status"], unique=False)

    op.create_table(
        "snapshots",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("run_id", sa.String(length=36), nullable=False),
        sa.Column("stage", sa.Integer(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("team", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["run_id"], ["runs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_snapshots_player_id"), "snapshots", ["player_id"], unique=False)
    op.create_index(op.f("ix_snapshots_run_id"), "snapshots", ["run_id"], unique=False)
    op.create_index(op.f("ix_snapshots_stage"), "snapshots", ["stage"], unique=False)
    op.create_index("ix_snapshots_stage_wins", "snapshots", ["stage", "wins"], unique=False)

    op.create_table(
        "bot_teams",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("stage", sa.Integer(), nullable=False),
        sa.Column("difficulty", sa.Integer(), nullable=False),
        sa.Column("team", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bot_teams_stage"), "bot_teams", ["stage"], unique=False)
    op.create_index(op.f("ix_bot_teams_difficulty"), "bot_teams", ["difficulty"], unique=False)
    op.create_index(
        "ix_bot_teams_stage_difficulty", "bot_teams", ["stage", "difficulty"], unique=False
    )

    op.create_table(
        "battles",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("run_id", sa.String(length=36), nullable=False),
        sa.Column("enemy_snapshot_id", sa.String(length=36), nullable=True),
        sa.Column("seed", sa.Integer(), nullable=False),
        sa.Column(
            "result",
            sa.Enum("pending", "win", "loss", name="battleresult"),
            nullable=False,
        ),
        sa.Column("events", sa.JSON(), nullable=True),
        sa.Column("enemy_team", sa.JSON(), nullable=True),
        sa.Column("player_team", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["run_id"], ["runs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["enemy_snapshot_id"], ["snapshots.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_battles_run_id"), "battles", ["run_id"], unique=False)
    op.create_index(
        op.f("ix_battles_enemy_snapshot_id"), "battles", ["enemy_snapshot_id"], unique=False
    )
    op.create_index(op.f("ix_battles_result"), "battles", ["result"], unique=False)
    # At most one pending battle per run
    op.create_index(
        "uq_battles_run_id_pending",
        "battles",
        ["run_id"],
        unique=True,
        sqlite_where=sa.text("result = 'pending'"),
        postgresql_where=sa.text("result = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_battles_run_id_pending", table_name="battles")
    op.drop_index(op.f("ix_battles_result"), table_name="battles")
    op.drop_index(op.f("ix_battles_enemy_snapshot_id"), table_name="battles")
    op.drop_index(op.f("ix_battles_run_id"), table_name="battles")
    op.drop_table("battles")

    op.drop_index("ix_bot_teams_stage_difficulty", table_name="bot_teams")
    op.drop_index(op.f("ix_bot_teams_difficulty"), table_name="bot_teams")
    op.drop_index(op.f("ix_bot_teams_stage"), table_name="bot_teams")
    op.drop_table("bot_teams")

    op.drop_index("ix_snapshots_stage_wins", table_name="snapshots")
    op.drop_index(op.f("ix_snapshots_stage"), table_name="snapshots")
    op.drop_index(op.f("ix_snapshots_run_id"), table_name="snapshots")
    op.drop_index(op.f("ix_snapshots_player_id"), table_name="snapshots")
    op.drop_table("snapshots")

    op.drop_index("ix_runs_player_id_status", table_name="runs")
    op.drop_index(op.f("ix_runs_player_id"), table_name="runs")
    op.drop_table("runs")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS battleresult")
        op.execute("DROP TYPE IF EXISTS runstatus")
