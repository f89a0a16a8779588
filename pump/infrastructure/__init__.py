"""Infrastructure layer: connectors, persistence and CLI."""
