"""
Backend package for the blogging platform API.

This package provides a FastAPI application with directory (database) and
object-storage abstractions, plus the validation and identity helpers the
routes are built from.
"""
