"""Domain models and vocabulary.

Pure data structures (Pydantic v2, enums): no HTTP, no I/O.
"""
