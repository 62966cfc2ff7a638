"""In-process caching primitives."""
