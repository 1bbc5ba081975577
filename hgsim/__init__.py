"""Hunger Games style elimination contest simulator."""
