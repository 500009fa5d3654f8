"""Core utilities: configuration, logging, error translation and metrics."""
