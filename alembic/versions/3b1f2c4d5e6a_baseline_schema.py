"""baseline schema

Revision ID: 3b1f2c4d5e6a
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3b1f2c4d5e6a"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # leagues
    op.create_table(
        "leagues",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=140), nullable=False, unique=True),
        sa.Column("sport", sa.String(length=60), nullable=False, server_default="Football"),
        sa.Column("country", sa.String(length=60), nullable=False, server_default="Global"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_leagues_slug", "leagues", ["slug"], unique=True)

    # teams
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column(
            "league_id",
            sa.Integer(),
            sa.ForeignKey("leagues.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("played", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("wins", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("draws", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("losses", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("goals_for", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("goals_against", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("goal_difference", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("league_id", "name", name="uq_team_league_name"),  # <— inline UNIQUE (SQLite-safe)
    )
    op.create_index("ix_teams_league_id", "teams", ["league_id"])

    # matches
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "league_id",
            sa.Integer(),
            sa.ForeignKey("leagues.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "home_team_id",
            sa.Integer(),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "away_team_id",
            sa.Integer(),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date_time", sa.DateTime(), nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("UPCOMING", "FINISHED", name="matchstatus"),
            nullable=False,
            server_default="UPCOMING",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_matches_league_id", "matches", ["league_id"])
    op.create_index("ix_matches_home_team_id", "matches", ["home_team_id"])
    op.create_index("ix_matches_away_team_id", "matches", ["away_team_id"])
    op.create_index("ix_matches_date_time", "matches", ["date_time"])


def downgrade() -> None:
    op.drop_index("ix_matches_date_time", table_name="matches")
    op.drop_index("ix_matches_away_team_id", table_name="matches")
    op.drop_index("ix_matches_home_team_id", table_name="matches")
    op.drop_index("ix_matches_league_id", table_name="matches")
    op.drop_table("matches")

    op.drop_index("ix_teams_league_id", table_name="teams")
    op.drop_table("teams")

    op.drop_index("ix_leagues_slug", table_name="leagues")
    op.drop_table("leagues")
