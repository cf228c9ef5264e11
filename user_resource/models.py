"""
Pydantic models for the user resource service.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A user record, keyed by its identifier."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": "1", "name": "john", "age": 21}}
    )

    id: str = Field("", description="identifier of the user")
    name: str = Field("", description="name of the user", examples=["john"])
    age: int = Field(0, description="age of the user", examples=[21])


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    timestamp: str
    users: int


UserList = List[User]
