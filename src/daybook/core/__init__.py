"""Shared infrastructure: configuration, exceptions, events and logging."""
