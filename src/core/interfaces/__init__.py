"""Core interfaces/abstractions.

Contracts (Protocol) that concrete adapters implement or consume.
"""
