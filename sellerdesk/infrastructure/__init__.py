"""Infrastructure layer - configuration, database access and logging."""
