"""Infrastructure layer: adapters, database, event bus, logging."""
