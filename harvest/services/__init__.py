"""Telemetry pipeline and prediction services."""
