"""Shared helpers for logging configuration and event-loop bridging."""
