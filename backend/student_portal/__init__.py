"""Application package for the student portal backend.

This package exposes the service, repository, converter and model
modules used by the FastAPI application. It is intentionally
lightweight; individual modules contain the concrete implementations
and documentation.
"""
