"""
Tests for JSON/XML content negotiation.
"""

import pytest
from lxml import etree

from user_resource.exceptions import (
    InvalidUserPayloadException,
    NotAcceptableException,
    UnsupportedMediaTypeException,
)
from user_resource.models import User
from user_resource.negotiation import (
    MIME_JSON,
    MIME_XML,
    decode_user,
    encode_user_xml,
    encode_users_xml,
    request_media_type,
    select_response_media_type,
)


class TestSelectResponseMediaType:
    """Accept header handling."""

    @pytest.mark.parametrize("accept", [None, "", "*/*", "application/json", "application/*"])
    def test_defaults_to_json(self, accept):
        assert select_response_media_type(accept) == MIME_JSON

    @pytest.mark.parametrize("accept", ["application/xml", "text/xml", "text/html, application/xml"])
    def test_xml(self, accept):
        assert select_response_media_type(accept) == MIME_XML

    def test_quality_ordering(self):
        """Highest quality wins regardless of position."""
        accept = "application/json;q=0.5, application/xml;q=0.9"
        assert select_response_media_type(accept) == MIME_XML

    def test_zero_quality_is_excluded(self):
        accept = "application/json;q=0, application/xml"
        assert select_response_media_type(accept) == MIME_XML

    def test_not_acceptable(self):
        with pytest.raises(NotAcceptableException) as exc_info:
            select_response_media_type("application/pdf")

        assert exc_info.value.status_code == 406

    def test_not_acceptable_falls_back_when_lenient(self):
        assert select_response_media_type("image/png", strict=False) == MIME_JSON


class TestRequestMediaType:
    """Content-Type header handling."""

    def test_missing_is_json(self):
        assert request_media_type(None) == MIME_JSON

    def test_json_with_charset(self):
        assert request_media_type("application/json; charset=utf-8") == MIME_JSON

    @pytest.mark.parametrize("content_type", ["application/xml", "text/xml", "Application/XML"])
    def test_xml(self, content_type):
        assert request_media_type(content_type) == MIME_XML

    def test_unsupported(self):
        with pytest.raises(UnsupportedMediaTypeException) as exc_info:
            request_media_type("text/plain")

        assert exc_info.value.status_code == 415
        assert exc_info.value.media_type == "text/plain"


class TestDecodeUser:
    """Decoding request bodies into user records."""

    def test_json(self):
        user = decode_user(b'{"id": "1", "name": "Melissa", "age": 30}', MIME_JSON)

        assert user == User(id="1", name="Melissa", age=30)

    def test_json_missing_fields_take_zero_values(self):
        user = decode_user(b'{"id": "7"}', MIME_JSON)

        assert user == User(id="7", name="", age=0)

    def test_json_unknown_fields_are_ignored(self):
        user = decode_user(b'{"id": "1", "email": "x@y.z"}', MIME_JSON)

        assert user.id == "1"

    def test_seed_is_overlaid(self):
        user = decode_user(b'{"name": "Melissa"}', MIME_JSON, seed=User(id="3"))

        assert user == User(id="3", name="Melissa", age=0)

    def test_body_id_overrides_seed(self):
        user = decode_user(b'{"id": "9"}', MIME_JSON, seed=User(id="3"))

        assert user.id == "9"

    def test_xml(self):
        body = b"<User><ID>1</ID><Name>Melissa</Name><Age>30</Age></User>"

        assert decode_user(body, MIME_XML) == User(id="1", name="Melissa", age=30)

    def test_xml_tags_are_case_insensitive(self):
        body = b"<User><Id>1</Id><name>Melissa Raspberry</name></User>"

        assert decode_user(body, MIME_XML) == User(id="1", name="Melissa Raspberry", age=0)

    @pytest.mark.parametrize(
        "body,media_type",
        [
            (b"", MIME_JSON),
            (b"{not json", MIME_JSON),
            (b'["a", "b"]', MIME_JSON),
            (b'{"age": "old"}', MIME_JSON),
            (b"<User><ID>1</ID>", MIME_XML),
            (b"<User><Age>abc</Age></User>", MIME_XML),
        ],
    )
    def test_invalid_payloads(self, body, media_type):
        with pytest.raises(InvalidUserPayloadException) as exc_info:
            decode_user(body, media_type)

        assert exc_info.value.status_code == 400
        assert exc_info.value.media_type == media_type


class TestDecodeZeroValues:
    """Empty, null and mistyped values follow the zero-value rules."""

    @pytest.mark.parametrize("age_element", [b"<Age></Age>", b"<Age/>", b"<Age>  </Age>"])
    def test_empty_xml_int_is_zero(self, age_element):
        body = b"<User><ID>1</ID><Name>M</Name>" + age_element + b"</User>"

        assert decode_user(body, MIME_XML) == User(id="1", name="M", age=0)

    def test_empty_xml_string_is_empty(self):
        body = b"<User><ID>1</ID><Name></Name></User>"

        user = decode_user(body, MIME_XML, seed=User(id="1", name="Seeded"))

        assert user.name == ""

    def test_xml_text_is_converted(self):
        body = b"<User><ID>1</ID><Age> 31 </Age></User>"

        assert decode_user(body, MIME_XML).age == 31

    def test_json_null_keeps_seed_value(self):
        seed = User(id="3", name="Kept", age=5)

        user = decode_user(b'{"name": null, "age": 6}', MIME_JSON, seed=seed)

        assert user == User(id="3", name="Kept", age=6)

    def test_json_null_without_seed_is_zero_value(self):
        user = decode_user(b'{"id": "1", "name": null, "age": null}', MIME_JSON)

        assert user == User(id="1", name="", age=0)

    @pytest.mark.parametrize(
        "body",
        [b'{"age": "31"}', b'{"id": 1}', b'{"age": 31.5}', b'{"age": true}'],
    )
    def test_json_values_must_match_field_types(self, body):
        with pytest.raises(InvalidUserPayloadException):
            decode_user(body, MIME_JSON)


class TestXmlParserHardening:
    """The XML parser does not expand entities."""

    def test_internal_entity_is_not_expanded(self):
        body = (
            b'<!DOCTYPE User [<!ENTITY x "expanded">]>'
            b"<User><ID>1</ID><Name>&x;</Name></User>"
        )

        user = decode_user(body, MIME_XML)

        assert user.id == "1"
        assert "expanded" not in user.name

    def test_comments_are_ignored(self):
        body = b"<User><!-- note --><ID>1</ID><Name>M</Name></User>"

        assert decode_user(body, MIME_XML) == User(id="1", name="M", age=0)

    def test_namespaced_elements_are_matched(self):
        body = b'<u:User xmlns:u="urn:users"><u:ID>1</u:ID><u:Age>4</u:Age></u:User>'

        assert decode_user(body, MIME_XML) == User(id="1", name="", age=4)


class TestEncodeXml:
    """XML encoding of users."""

    def test_single_user(self):
        root = etree.fromstring(encode_user_xml(User(id="1", name="Melissa", age=30)))

        assert root.tag == "User"
        assert root.findtext("ID") == "1"
        assert root.findtext("Name") == "Melissa"
        assert root.findtext("Age") == "30"

    def test_user_list(self):
        users = [User(id="1", name="a", age=1), User(id="2", name="b", age=2)]
        root = etree.fromstring(encode_users_xml(users))

        assert root.tag == "Users"
        assert [child.findtext("ID") for child in root] == ["1", "2"]

    def test_empty_list(self):
        root = etree.fromstring(encode_users_xml([]))

        assert root.tag == "Users"
        assert len(root) == 0

    def test_special_characters_are_escaped(self):
        xml = encode_user_xml(User(id="1", name="A & <B>", age=1))

        assert etree.fromstring(xml).findtext("Name") == "A & <B>"
