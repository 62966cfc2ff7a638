"""Optional durable persistence for processed readings and device status."""
