"""Tests for api/base.py - unified response envelope."""

import json
from datetime import timezone

from api.base import created_response, error_response, success_response, ErrorCodes


class TestSuccessResponse:

    def test_structure(self):
        resp = success_response({"foo": "bar"})
        assert resp.success is True
        assert resp.data == {"foo": "bar"}
        assert resp.error is None

    def test_request_id_generated(self):
        assert success_response({}).meta.request_id

    def test_request_id_passed_through(self):
        assert success_response({}, request_id="req-7").meta.request_id == "req-7"

    def test_timestamp_is_utc(self):
        assert success_response({}).meta.timestamp.tzinfo == timezone.utc


class TestErrorResponse:

    def test_structure(self):
        resp = error_response(ErrorCodes.INVITE_USED, "This invite has already been used.")
        assert resp.success is False
        assert resp.data is None
        assert resp.error.code == "INVITE_USED"
        assert resp.error.message == "This invite has already been used."


class TestCreatedResponse:

    def test_status_and_envelope(self):
        response = created_response({"id": "t-1"})

        assert response.status_code == 201
        body = json.loads(response.body)
        assert body["success"] is True
        assert body["data"] == {"id": "t-1"}
