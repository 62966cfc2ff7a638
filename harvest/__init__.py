"""
Harvest telemetry service.

Ingests environmental and power readings from an energy-harvesting ESP32
device, derives efficiency and energy metrics, keeps a bounded in-memory
history, streams updates to observers, and predicts short-horizon solar
power output.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""
