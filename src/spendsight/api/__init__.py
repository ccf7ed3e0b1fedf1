"""
HTTP API Package

FastAPI application exposing datasets and reports.
"""

from .app import create_app

__all__ = ["create_app"]
