"""Temporal tracking: point filtering, contact debouncing and hand events."""
