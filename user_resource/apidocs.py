"""
API description document.

The OpenAPI document is generated from the registered routes and then
enriched with static service metadata: title, description, contact,
license, version and the tag list.
"""

from typing import Any, Callable, Dict

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

API_TITLE = "UserService"
API_DESCRIPTION = "Resource for managing Users"
API_VERSION = "1.0.0"
API_CONTACT = {"name": "john", "email": "john@doe.rp", "url": "http://johndoe.org"}
API_LICENSE = {"name": "MIT", "url": "http://mit.org"}
API_TAGS = [{"name": "users", "description": "Managing users"}]


def enrich_openapi(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decorate a generated OpenAPI document with service metadata.

    Replaces the info block and the tag list; paths and components are
    left untouched.

    Args:
        document: OpenAPI document as produced by FastAPI

    Returns:
        The same document, enriched
    """
    document["info"] = {
        "title": API_TITLE,
        "description": API_DESCRIPTION,
        "contact": dict(API_CONTACT),
        "license": dict(API_LICENSE),
        "version": API_VERSION,
    }
    document["tags"] = [dict(tag) for tag in API_TAGS]
    return document


def install_openapi(
    app: FastAPI,
    enrich: Callable[[Dict[str, Any]], Dict[str, Any]] = enrich_openapi,
) -> None:
    """
    Replace app.openapi with a builder that enriches the document once.

    The document is built lazily on first request, after all routes are
    registered, and cached on the app like FastAPI's default builder.
    """

    def openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        document = get_openapi(
            title=app.title,
            version=app.version,
            openapi_version=app.openapi_version,
            description=app.description,
            routes=app.routes,
            separate_input_output_schemas=app.separate_input_output_schemas,
        )
        app.openapi_schema = enrich(document)
        return app.openapi_schema

    app.openapi = openapi
