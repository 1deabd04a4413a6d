"""Core infrastructure: request context, logging, errors, persistence."""
