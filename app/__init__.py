"""Application layer: tracking session and engine."""
