"""
User resource service.

A small REST service exposing CRUD over an in-memory collection of user
records, with an enriched OpenAPI description document.
"""

__version__ = "1.0.0"
