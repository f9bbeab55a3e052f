"""HTTP adapter for the turn queue."""
