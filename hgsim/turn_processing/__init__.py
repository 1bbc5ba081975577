"""Round processing helpers.

This package centralizes event eligibility + round simulation so every stage
flows through the same pipeline and shows up consistently in logs.
"""
