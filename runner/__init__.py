"""Smoke runner for a live robot control API server."""
