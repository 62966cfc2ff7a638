"""FastAPI routers and application factory for the harvest service."""
