"""Tests for utils/request_context.py - request ID propagation via contextvars."""

from api.base import success_response
from utils.request_context import get_request_id, request_context, reset_request_id, set_request_id


class TestRequestContext:

    def test_none_outside_request(self):
        assert get_request_id() is None

    def test_set_and_reset(self):
        token = set_request_id("abc")
        assert get_request_id() == "abc"

        reset_request_id(token)
        assert get_request_id() is None

    def test_nested_contexts_restore(self):
        with request_context("outer"):
            with request_context("inner"):
                assert get_request_id() == "inner"
            assert get_request_id() == "outer"
        assert get_request_id() is None

    def test_envelope_uses_current_id(self):
        with request_context("trace-1"):
            assert success_response(None).meta.request_id == "trace-1"

    def test_envelope_fresh_id_outside_request(self):
        first = success_response(None).meta.request_id
        second = success_response(None).meta.request_id

        assert first and second and first != second
