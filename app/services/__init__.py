"""Catalog resolution, user movie state and their persistence."""
