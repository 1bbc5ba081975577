"""Stored event and character files: schemas, loading and saving."""
