"""Tests for the werkzeug request adapter."""
import logging
from dataclasses import dataclass
from typing import List, Optional

import pytest
from werkzeug.exceptions import BadRequest, RequestURITooLarge
from werkzeug.test import Client, EnvironBuilder
from werkzeug.wrappers import Request, Response

from typedqs import BRACKETS, DUPLICATE, Config, QueryString, QueryStringRejection
from typedqs.errors import ErrorKind


@dataclass
class Pagination:
    page: int
    per_page: int = 30
    tags: List[str] = None


@dataclass
class Search:
    __querystring_mode__ = DUPLICATE

    q: str
    lang: Optional[List[str]] = None


def make_app(extractor):
    @Request.application
    @extractor
    def app(request, query):
        return Response(repr(query))

    return app


class TestDecode:
    def test_from_environ(self, make_environ):
        result = QueryString(Pagination).from_environ(make_environ("page=2"))
        assert result == Pagination(page=2)

    def test_from_environ_latin1_roundtrip(self, make_environ):
        environ = make_environ(b"page=1&tags=caf%C3%A9")
        result = QueryString(Pagination, DUPLICATE).from_environ(environ)
        assert result.tags == ["café"]

    def test_raw_utf8_in_environ(self, make_environ):
        environ = make_environ("page=1&tags=café".encode("utf-8"))
        result = QueryString(Pagination, DUPLICATE).from_environ(environ)
        assert result.tags == ["café"]

    def test_missing_query_string(self):
        with pytest.raises(QueryStringRejection):
            QueryString(Pagination).from_environ({})

    def test_from_request(self):
        request = Request(EnvironBuilder(query_string="page=3&per_page=10").get_environ())
        assert QueryString(Pagination).from_request(request) == Pagination(3, 10)

    def test_from_request_without_query_string_attribute(self, make_environ):
        class Bare:
            environ = make_environ("page=4")

        assert QueryString(Pagination).from_request(Bare()).page == 4

    def test_rejection(self, make_environ):
        with pytest.raises(QueryStringRejection) as info:
            QueryString(Pagination).from_environ(make_environ("page=abc"))
        rejection = info.value
        assert isinstance(rejection, BadRequest)
        assert rejection.code == 400
        assert rejection.error.kind is ErrorKind.INVALID_TYPE
        assert rejection.__cause__ is rejection.error
        assert rejection.description.startswith("Failed to deserialize query string: ")
        assert "'page'" in rejection.description


class TestModes:
    def test_explicit_mode(self, make_environ):
        result = QueryString(Pagination, DUPLICATE).from_environ(
            make_environ("page=1&tags=a&tags=b")
        )
        assert result.tags == ["a", "b"]

    def test_declared_mode(self, make_environ):
        result = QueryString(Search).from_environ(make_environ("q=x&lang=en&lang=fr"))
        assert result == Search(q="x", lang=["en", "fr"])

    def test_config_mode(self, make_environ):
        extractor = QueryString(Pagination, config={"QUERYSTRING_MODE": "brackets"})
        result = extractor.from_environ(make_environ("page=1&tags[]=a&tags[]=b"))
        assert result.tags == ["a", "b"]

    def test_config_delimiter(self, make_environ):
        config = {"QUERYSTRING_MODE": "delimiter", "QUERYSTRING_SEPARATOR": "|"}
        extractor = QueryString(Pagination, config=config)
        assert extractor.from_environ(make_environ("page=1&tags=a|b")).tags == ["a", "b"]

    def test_declared_mode_beats_config(self, make_environ):
        extractor = QueryString(Search, config={"QUERYSTRING_MODE": "brackets"})
        assert extractor.resolve_mode() == DUPLICATE

    def test_explicit_mode_beats_declared(self):
        assert QueryString(Search, BRACKETS).resolve_mode() == BRACKETS


class TestLimits:
    def test_max_length(self, make_environ):
        extractor = QueryString(Pagination, config={"QUERYSTRING_MAX_LENGTH": 10})
        assert extractor.from_environ(make_environ("page=12345")).page == 12345
        with pytest.raises(RequestURITooLarge):
            extractor.from_environ(make_environ("page=123456"))

    def test_deny_unknown_fields_from_config(self, make_environ):
        extractor = QueryString(
            Pagination, config={"QUERYSTRING_DENY_UNKNOWN_FIELDS": True}
        )
        with pytest.raises(QueryStringRejection) as info:
            extractor.from_environ(make_environ("page=1&sort=name"))
        assert info.value.error.kind is ErrorKind.CUSTOM

    def test_deny_unknown_fields_argument_overrides_config(self, make_environ):
        extractor = QueryString(
            Pagination,
            config={"QUERYSTRING_DENY_UNKNOWN_FIELDS": True},
            deny_unknown_fields=False,
        )
        assert extractor.from_environ(make_environ("page=1&sort=name")).page == 1


class TestView:
    def test_injects_query(self):
        client = Client(make_app(QueryString(Pagination)))
        response = client.get("/?page=2&per_page=5")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == repr(Pagination(2, 5))

    def test_bad_request(self):
        client = Client(make_app(QueryString(Pagination)))
        response = client.get("/?page=two")
        assert response.status_code == 400
        assert "Failed to deserialize query string" in response.get_data(as_text=True)

    def test_missing_field(self):
        client = Client(make_app(QueryString(Pagination)))
        response = client.get("/")
        assert response.status_code == 400
        assert "missing field" in response.get_data(as_text=True)

    def test_too_long(self):
        extractor = QueryString(Pagination, config={"QUERYSTRING_MAX_LENGTH": 8})
        response = Client(make_app(extractor)).get("/?page=1&per_page=2")
        assert response.status_code == 414

    def test_wraps_view(self):
        def listing(request, query):
            """List things."""

        wrapped = QueryString(Pagination)(listing)
        assert wrapped.__name__ == "listing"
        assert wrapped.__doc__ == "List things."


class TestLogging:
    def test_rejections_are_logged(self, make_environ, caplog):
        caplog.set_level(logging.INFO, logger="typedqs.extract")
        with pytest.raises(QueryStringRejection):
            QueryString(Pagination).from_environ(make_environ("page=abc"))
        [record] = [r for r in caplog.records if r.name == "typedqs.extract"]
        assert record.levelno == logging.INFO
        assert "Pagination" in record.getMessage()

    def test_decode_is_logged_at_debug(self, make_environ, caplog):
        caplog.set_level(logging.DEBUG, logger="typedqs.decoder")
        QueryString(Pagination).from_environ(make_environ("page=1"))
        assert any(
            "urlencoded" in r.getMessage()
            for r in caplog.records
            if r.name == "typedqs.decoder"
        )

    def test_logger_honours_debug(self):
        extractor = QueryString(Pagination, config=Config({"DEBUG": True}))
        logger = extractor.logger
        try:
            assert logger.name == "typedqs.extract"
            assert logger.getEffectiveLevel() == logging.DEBUG
        finally:
            logger.setLevel(logging.NOTSET)
