"""
Unit Tests for the structured logger
"""
import logging

import pytest

from app.core.logging_config import StudentRecordsLogger


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def recorded():
    log = StudentRecordsLogger("studentrecords.test")
    log.setLevel(logging.DEBUG)
    log.propagate = False
    handler = RecordingHandler()
    log.addHandler(handler)
    return log, handler.records


class TestLogRequest:

    @pytest.mark.parametrize("status_code, level", [
        (200, logging.INFO),
        (201, logging.INFO),
        (401, logging.WARNING),
        (404, logging.WARNING),
        (500, logging.ERROR),
        (503, logging.ERROR),
    ])
    def test_level_follows_status(self, recorded, status_code, level):
        log, records = recorded

        log.log_request("GET", "/api/students", status_code, 12.5)

        assert [r.levelno for r in records] == [level]

    def test_structured_fields(self, recorded):
        log, records = recorded

        log.log_request("POST", "/api/students", 201, 3.2, client_ip="127.0.0.1")

        record = records[0]
        assert record.getMessage() == "POST /api/students 201 in 3ms"
        assert record.event_type == "http_request_complete"
        assert (record.http_method, record.http_path, record.http_status) == ("POST", "/api/students", 201)
        assert record.client_ip == "127.0.0.1"
