"""Persistence: engine, ORM models, repositories and migrations."""
