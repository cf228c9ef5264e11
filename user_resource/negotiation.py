"""
Content negotiation for user resources.

Request bodies are decoded from JSON or XML according to Content-Type, and
responses are encoded according to Accept. JSON is the default on both
sides when the client does not say otherwise.

XML wire format:

    <User><ID>1</ID><Name>Melissa</Name><Age>30</Age></User>

Element names are matched case-insensitively when decoding, so <Id> and
<id> are accepted too. Lists are wrapped in a <Users> element.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from lxml import etree
from pydantic import TypeAdapter, ValidationError

from .exceptions import (
    InvalidUserPayloadException,
    NotAcceptableException,
    UnsupportedMediaTypeException,
)
from .models import User

MIME_JSON = "application/json"
MIME_XML = "application/xml"

# Field name -> XML element name used when encoding
XML_FIELDS = {"id": "ID", "name": "Name", "age": "Age"}

_JSON_TYPES = {MIME_JSON, "text/json"}
_XML_TYPES = {MIME_XML, "text/xml"}
_WILDCARDS = {"*/*", "application/*"}


def _strip_params(media_type: str) -> str:
    """Drop parameters such as charset and normalize case."""
    return media_type.split(";", 1)[0].strip().lower()


def _parse_accept(accept: str) -> List[Tuple[str, float]]:
    """
    Parse an Accept header into (media type, quality) pairs.

    Entries are returned highest quality first; entries with q=0 are dropped.
    """
    entries: List[Tuple[str, float, int]] = []
    for position, part in enumerate(accept.split(",")):
        pieces = [piece.strip() for piece in part.split(";")]
        media_type = pieces[0].lower()
        if not media_type:
            continue

        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0

        if quality > 0:
            entries.append((media_type, quality, position))

    entries.sort(key=lambda entry: (-entry[1], entry[2]))
    return [(media_type, quality) for media_type, quality, _ in entries]


def select_response_media_type(accept: Optional[str], strict: bool = True) -> str:
    """
    Choose the response media type for an Accept header.

    Args:
        accept: Raw Accept header value, or None
        strict: Raise when nothing matches; otherwise fall back to JSON

    Returns:
        MIME_JSON or MIME_XML

    Raises:
        NotAcceptableException: If strict and no producible type is acceptable
    """
    if not accept or not accept.strip():
        return MIME_JSON

    for media_type, _ in _parse_accept(accept):
        if media_type in _JSON_TYPES or media_type in _WILDCARDS:
            return MIME_JSON
        if media_type in _XML_TYPES:
            return MIME_XML
        if media_type == "text/*":
            return MIME_XML

    if strict:
        raise NotAcceptableException(accept)
    return MIME_JSON


def request_media_type(content_type: Optional[str]) -> str:
    """
    Classify a request Content-Type as JSON or XML.

    A missing Content-Type is treated as JSON.

    Raises:
        UnsupportedMediaTypeException: For any other media type
    """
    if not content_type:
        return MIME_JSON

    media_type = _strip_params(content_type)
    if media_type in _JSON_TYPES or media_type.endswith("+json"):
        return MIME_JSON
    if media_type in _XML_TYPES or media_type.endswith("+xml"):
        return MIME_XML
    raise UnsupportedMediaTypeException(media_type)


# Parses a request body as a JSON object; rejects malformed JSON and non-objects
_JSON_OBJECT = TypeAdapter(Dict[str, Any])


def _xml_parser() -> etree.XMLParser:
    """Parser that neither expands entities nor fetches external resources."""
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _validation_reasons(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


def _fields_from_json(body: bytes) -> Dict[str, Any]:
    """
    Decode a JSON object into user fields.

    Null values are dropped so that they leave the seed value in place.
    """
    try:
        data = _JSON_OBJECT.validate_json(body)
    except ValidationError as e:
        raise InvalidUserPayloadException(_validation_reasons(e), MIME_JSON)

    return {
        key: value
        for key, value in data.items()
        if key in User.model_fields and value is not None
    }


def _fields_from_xml(body: bytes) -> Dict[str, Any]:
    """
    Decode an XML document into user fields.

    An empty element sets its field to the zero value.
    """
    try:
        root = etree.fromstring(body, parser=_xml_parser())
    except etree.XMLSyntaxError as e:
        raise InvalidUserPayloadException(str(e), MIME_XML)

    fields: Dict[str, Any] = {}
    for child in root:
        # Comments and processing instructions have non-string tags
        if not isinstance(child.tag, str):
            continue
        name = etree.QName(child).localname.lower()
        if name not in XML_FIELDS:
            continue
        text = (child.text or "").strip()
        fields[name] = text if text else User.model_fields[name].default
    return fields


def decode_user(body: bytes, media_type: str, seed: Optional[User] = None) -> User:
    """
    Decode a request body into a user record.

    Fields present in the body overwrite those of the seed record; absent
    fields keep the seed's value (or the zero value without a seed). JSON
    values must already have the field's type, so "31" is not an age. XML
    text is converted, since everything in XML is text.

    Args:
        body: Raw request body
        media_type: MIME_JSON or MIME_XML
        seed: Record to overlay the body onto

    Returns:
        Decoded user record

    Raises:
        InvalidUserPayloadException: If the body cannot be decoded
    """
    if media_type == MIME_XML:
        fields = _fields_from_xml(body)
    else:
        fields = _fields_from_json(body)

    merged = seed.model_dump() if seed is not None else {}
    merged.update(fields)

    try:
        return User.model_validate(merged, strict=media_type != MIME_XML)
    except ValidationError as e:
        raise InvalidUserPayloadException(_validation_reasons(e), media_type)


async def read_user(
    request: Request,
    seed: Optional[User] = None,
    error_status: Optional[int] = None,
) -> User:
    """
    Read and decode the user record in a request body.

    Args:
        request: Incoming request
        seed: Record to overlay the body onto
        error_status: Status to report for undecodable bodies instead of 400

    Raises:
        UnsupportedMediaTypeException: If Content-Type is neither JSON nor XML
        InvalidUserPayloadException: If the body cannot be decoded
    """
    media_type = request_media_type(request.headers.get("content-type"))
    body = await request.body()
    try:
        return decode_user(body, media_type, seed=seed)
    except InvalidUserPayloadException as e:
        if error_status is not None:
            e.status_code = error_status
        raise


def _user_element(user: User) -> etree._Element:
    element = etree.Element("User")
    for field, tag in XML_FIELDS.items():
        etree.SubElement(element, tag).text = str(getattr(user, field))
    return element


def encode_users_xml(users: Iterable[User]) -> str:
    """Encode users as a <Users> document."""
    root = etree.Element("Users")
    for user in users:
        root.append(_user_element(user))
    return etree.tostring(root, encoding="unicode")


def encode_user_xml(user: User) -> str:
    """Encode a single user as a <User> document."""
    return etree.tostring(_user_element(user), encoding="unicode")


def write_entity(request: Request, entity: Any, status_code: int = 200) -> Response:
    """
    Write a user or list of users in the negotiated media type.

    Raises:
        NotAcceptableException: If the Accept header admits neither JSON nor XML
    """
    media_type = select_response_media_type(request.headers.get("accept"))

    if media_type == MIME_XML:
        if isinstance(entity, User):
            content = encode_user_xml(entity)
        else:
            content = encode_users_xml(entity)
        return Response(content=content, status_code=status_code, media_type=MIME_XML)

    if isinstance(entity, User):
        payload: Any = entity.model_dump()
    else:
        payload = [user.model_dump() for user in entity]
    return JSONResponse(content=payload, status_code=status_code)


def write_error(request: Request, message: str, status_code: int) -> Response:
    """Write an error body, falling back to JSON when Accept matches nothing."""
    media_type = select_response_media_type(request.headers.get("accept"), strict=False)

    if media_type == MIME_XML:
        root = etree.Element("Error")
        etree.SubElement(root, "detail").text = message
        return Response(
            content=etree.tostring(root, encoding="unicode"),
            status_code=status_code,
            media_type=MIME_XML,
        )
    return JSONResponse(content={"detail": message}, status_code=status_code)


def require_acceptable(request: Request) -> str:
    """
    Route dependency rejecting requests whose Accept header cannot be met.

    Runs before the handler, so a 406 never follows a store mutation.
    """
    return select_response_media_type(request.headers.get("accept"))
