"""JSON schemas for edidrandr profile files."""
