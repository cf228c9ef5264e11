"""
User resource router.

CRUD over the in-memory user store, mounted at /users. Request bodies may be
JSON or XML and responses follow the Accept header (see negotiation.py).

Endpoints:
    GET    /users/           list all users
    GET    /users/{user_id}  get a user
    PUT    /users/{user_id}  update (or insert) a user
    POST   /users            create a user
    POST   /users/{user_id}  create a user seeded with the path identifier
    DELETE /users/{user_id}  delete a user
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Path, Request, Response, status

from ..exceptions import UserNotFoundException, UserServiceException
from ..metrics import track_store_operation, update_store_size
from ..models import ErrorResponse, User
from ..negotiation import MIME_JSON, MIME_XML, read_user, require_acceptable, write_entity
from ..store import UserStore

logger = structlog.get_logger(__name__)

TAGS = ["users"]

router = APIRouter(
    prefix="/users",
    tags=TAGS,
    dependencies=[Depends(require_acceptable)],
)

_USER_SCHEMA = {"$ref": "#/components/schemas/User"}

# Documents both accepted encodings of the request body
USER_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            MIME_JSON: {"schema": _USER_SCHEMA},
            MIME_XML: {"schema": _USER_SCHEMA},
        },
    }
}

_XML_CONTENT = {"content": {MIME_XML: {}}}

_BAD_REQUEST = {"description": "Malformed user record", "model": ErrorResponse}


def get_user_store(request: Request) -> UserStore:
    """Dependency returning the application's user store."""
    return request.app.state.user_store


def _parse_error_status(request: Request, legacy_status: int) -> Optional[int]:
    """Status for undecodable bodies; None keeps the default 400."""
    if request.app.state.settings.LEGACY_PARSE_ERROR_STATUS:
        return legacy_status
    return None


def _user_id_param(examples: Optional[List[str]] = None):
    return Path(..., description="identifier of the user", examples=examples)


@router.get("", include_in_schema=False)
@router.get(
    "/",
    response_model=List[User],
    responses={200: {"description": "OK", **_XML_CONTENT}},
    summary="get all users",
)
async def find_all_users(request: Request, store: UserStore = Depends(get_user_store)):
    """Return every stored user. Order is unspecified."""
    users = store.list()
    track_store_operation("list", True)
    return write_entity(request, users)


@router.get(
    "/{user_id}",
    response_model=User,
    responses={
        200: {"description": "OK", **_XML_CONTENT},
        404: {"description": "Not Found", "model": ErrorResponse},
    },
    summary="get a user",
)
async def find_user(
    request: Request,
    user_id: str = _user_id_param(examples=["1"]),
    store: UserStore = Depends(get_user_store),
):
    """Return the user with the given identifier."""
    user = store.get(user_id)
    track_store_operation("get", user is not None)

    if user is None:
        raise UserNotFoundException(user_id)
    return write_entity(request, user)


@router.put(
    "/{user_id}",
    response_model=User,
    responses={
        200: {"description": "OK", **_XML_CONTENT},
        400: _BAD_REQUEST,
    },
    summary="update a user",
    openapi_extra=USER_REQUEST_BODY,
)
async def update_user(
    request: Request,
    user_id: str = _user_id_param(),
    store: UserStore = Depends(get_user_store),
):
    """
    Overwrite or insert a user.

    The record is keyed by the identifier in the body. A body without an
    identifier is stored under the path identifier.
    """
    try:
        user = await read_user(
            request, error_status=_parse_error_status(request, status.HTTP_404_NOT_FOUND)
        )
    except UserServiceException:
        track_store_operation("update", False)
        raise

    if not user.id:
        user = user.model_copy(update={"id": user_id})

    stored = store.put(user)
    track_store_operation("update", True)
    update_store_size(store.count())
    return write_entity(request, stored)


async def _create(request: Request, store: UserStore, user_id: str) -> Response:
    seed = User(id=user_id)
    try:
        user = await read_user(
            request,
            seed=seed,
            error_status=_parse_error_status(request, status.HTTP_500_INTERNAL_SERVER_ERROR),
        )
    except UserServiceException:
        track_store_operation("create", False)
        raise

    stored = store.put(user)
    track_store_operation("create", True)
    update_store_size(store.count())
    return write_entity(request, stored, status_code=status.HTTP_201_CREATED)


@router.post("/", include_in_schema=False)
@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={201: {"description": "Created", **_XML_CONTENT}, 400: _BAD_REQUEST},
    summary="create a user",
    openapi_extra=USER_REQUEST_BODY,
)
async def create_user(request: Request, store: UserStore = Depends(get_user_store)):
    """Create a user from the request body."""
    return await _create(request, store, user_id="")


@router.post(
    "/{user_id}",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={201: {"description": "Created", **_XML_CONTENT}, 400: _BAD_REQUEST},
    summary="create a user",
    openapi_extra=USER_REQUEST_BODY,
)
async def create_user_with_id(
    request: Request,
    user_id: str = _user_id_param(),
    store: UserStore = Depends(get_user_store),
):
    """
    Create a user seeded with the path identifier.

    Fields in the body override the seed, including the identifier.
    """
    return await _create(request, store, user_id=user_id)


@router.delete(
    "/{user_id}",
    response_class=Response,
    responses={200: {"description": "OK"}},
    summary="delete a user",
)
async def remove_user(
    user_id: str = _user_id_param(),
    store: UserStore = Depends(get_user_store),
):
    """Delete a user. Deleting an unknown identifier is a no-op."""
    removed = store.delete(user_id)
    track_store_operation("delete", True)
    update_store_size(store.count())

    if not removed:
        logger.debug("Delete of unknown user ignored", user_id=user_id)
    return Response(status_code=status.HTTP_200_OK)
