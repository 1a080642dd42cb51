"""
Core types - framework-agnostic.

Nothing in here imports requests, FastAPI or pydantic.
"""
