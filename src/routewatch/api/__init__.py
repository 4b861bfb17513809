"""Dashboard web API."""
