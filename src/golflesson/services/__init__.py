"""Service layer for golf lesson application."""
