"""
Initial schema: sensor_readings and device_status tables.

Creates the append-only sensor_readings table (one row per processed
reading, indexed on device_id and timestamp) and the device_status table
keyed by device_id. Value ranges reported by the device are enforced with
CHECK constraints matching the ingestion validator.

Revision ID: 001
Revises: None
Create Date: 2026-10-18

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# Revision identifiers used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create sensor_readings and device_status with their indexes."""
    op.create_table(
        "sensor_readings",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("device_id", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("temperature", sa.Double(), nullable=False),
        sa.Column("humidity", sa.Double(), nullable=False),
        sa.Column("bus_voltage", sa.Double(), nullable=False),
        sa.Column("current", sa.Double(), nullable=False),
        sa.Column("power", sa.Double(), nullable=False),
        sa.Column("light_value", sa.Double(), nullable=False),
        sa.Column("light_status", sa.Text(), nullable=False),
        sa.Column("wind_count", sa.Double(), nullable=False),
        sa.Column("hour", sa.Integer(), nullable=False),
        sa.Column("battery_level", sa.Integer(), nullable=False),
        sa.Column("solar_efficiency", sa.Double(), nullable=False),
        sa.Column("wind_efficiency", sa.Double(), nullable=False),
        sa.Column("total_efficiency", sa.Integer(), nullable=False),
        sa.Column("energy_harvested", sa.Double(), nullable=False),
        sa.Column("cost_savings", sa.Double(), nullable=False),
        sa.Column("carbon_offset", sa.Double(), nullable=False),
        sa.Column("is_online", sa.Boolean(), nullable=False),
        sa.Column("connection_quality", sa.Text(), nullable=False),
        sa.Column("prediction", sa.JSON(), nullable=True),
        sa.Column("prediction_accuracy", sa.Double(), nullable=True),
        sa.Column("efficiency_vs_prediction", sa.Double(), nullable=True),
        sa.CheckConstraint(
            "light_value >= 0 AND light_value <= 4095", name="check_light_value_range"
        ),
        sa.CheckConstraint(
            "wind_count >= 0 AND wind_count <= 10000", name="check_wind_count_range"
        ),
        sa.CheckConstraint("hour >= 0 AND hour <= 23", name="check_hour_range"),
    )
    op.create_index("ix_sensor_readings_device_id", "sensor_readings", ["device_id"])
    op.create_index("ix_sensor_readings_timestamp", "sensor_readings", ["timestamp"])

    op.create_table(
        "device_status",
        sa.Column("device_id", sa.Text(), primary_key=True),
        sa.Column("is_online", sa.Boolean(), nullable=False),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.Column("battery_level", sa.Integer(), nullable=False),
        sa.Column("connection_quality", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    """Drop device_status and sensor_readings."""
    op.drop_table("device_status")
    op.drop_index("ix_sensor_readings_timestamp", table_name="sensor_readings")
    op.drop_index("ix_sensor_readings_device_id", table_name="sensor_readings")
    op.drop_table("sensor_readings")
