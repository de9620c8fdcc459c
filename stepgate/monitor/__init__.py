"""Terminal rendering of gate results."""
