"""Utility helpers for golf lesson application."""
