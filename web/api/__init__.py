"""Read-only API views."""
