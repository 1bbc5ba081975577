"""Core simulation primitives (tags, tributes, event templates, messages and rounds).

Kept free of CLI and storage concerns so it can be reused by the game, loaders, and tests.
"""
