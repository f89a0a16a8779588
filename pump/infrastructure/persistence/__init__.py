"""Persistence layer: database backends, models, repositories and unit of work."""
