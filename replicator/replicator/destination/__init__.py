"""Conflict handling and writers for the destination filesystem and archive."""
