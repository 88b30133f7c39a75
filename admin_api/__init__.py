"""Social Admin Analytics API."""
