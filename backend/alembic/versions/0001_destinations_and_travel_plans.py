"""destinations and travel_plans

Revision ID: 0001
Revises:
Create Date: 2025-07-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa
import sqlmodel


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "destinations",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column("country", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False),
        sa.Column("image", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column("highlights", sa.JSON(), nullable=False),
        sa.Column("estimated_cost", sa.Float(), nullable=False),
        sa.Column("duration", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("match_score", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("latitude BETWEEN -90 AND 90", name="check_valid_latitude"),
        sa.CheckConstraint("longitude BETWEEN -180 AND 180", name="check_valid_longitude"),
        sa.CheckConstraint("estimated_cost >= 0", name="check_non_negative_cost"),
    )
    op.create_index("idx_destinations_name", "destinations", ["name"])
    op.create_index("idx_destinations_country", "destinations", ["country"])
    op.create_index("idx_destinations_estimated_cost", "destinations", ["estimated_cost"])

    op.create_table(
        "travel_plans",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("destination", sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("source", sa.Enum("SEED", "GENERATED", name="plansource"), nullable=False),
        sa.Column("map_center", sa.JSON(), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
        sa.Column("cost_breakdown", sa.JSON(), nullable=False),
        sa.Column("itinerary", sa.JSON(), nullable=False),
        sa.Column("request_text", sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("duration > 0", name="check_positive_duration"),
    )
    op.create_index("idx_travel_plans_destination", "travel_plans", ["destination"])
    op.create_index("idx_travel_plans_source", "travel_plans", ["source"])
    op.create_index("idx_travel_plans_created_at", "travel_plans", ["created_at"])


def downgrade():
    op.drop_index("idx_travel_plans_created_at", table_name="travel_plans")
    op.drop_index("idx_travel_plans_source", table_name="travel_plans")
    op.drop_index("idx_travel_plans_destination", table_name="travel_plans")
    op.drop_table("travel_plans")
    sa.Enum(name="plansource").drop(op.get_bind(), checkfirst=True)
    op.drop_index("idx_destinations_estimated_cost", table_name="destinations")
    op.drop_index("idx_destinations_country", table_name="destinations")
    op.drop_index("idx_destinations_name", table_name="destinations")
    op.drop_table("destinations")
