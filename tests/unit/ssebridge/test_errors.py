# -*- coding: utf-8 -*-
"""Tests for outbound failure classification and JSON-RPC error objects.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Keval Mahajan
"""

# Standard
import errno

# Third-Party
import httpx
import pytest

# First-Party
from ssebridge.errors import classify_exception, classify_status, describe_failure, extract_request_id, FailureKind, JSONRPC_INTERNAL_ERROR, make_error


@pytest.mark.parametrize(
    "status, kind",
    [
        (404, FailureKind.ENDPOINT_MISSING),
        (401, FailureKind.SESSION_INVALID),
        (403, FailureKind.SESSION_INVALID),
        (400, FailureKind.HTTP_ERROR),
        (500, FailureKind.HTTP_ERROR),
        (503, FailureKind.HTTP_ERROR),
    ],
)
def test_classify_status(status, kind):
    assert classify_status(status) is kind


def test_timeouts():
    assert classify_exception(httpx.ReadTimeout("slow")) is FailureKind.TIMEOUT
    assert classify_exception(httpx.ConnectTimeout("slow")) is FailureKind.TIMEOUT
    assert classify_exception(httpx.PoolTimeout("slow")) is FailureKind.TIMEOUT


def test_connection_refused_from_chained_oserror():
    cause = ConnectionRefusedError(errno.ECONNREFUSED, "nope")
    exc = httpx.ConnectError("All connection attempts failed")
    exc.__cause__ = cause
    assert classify_exception(exc) is FailureKind.CONNECTION_REFUSED


def test_connection_refused_from_errno():
    assert classify_exception(OSError(errno.ECONNREFUSED, "refused")) is FailureKind.CONNECTION_REFUSED


def test_connection_refused_from_message():
    assert classify_exception(httpx.ConnectError("[Errno 111] Connection refused")) is FailureKind.CONNECTION_REFUSED


def test_other_transport_errors_are_network_errors():
    assert classify_exception(httpx.ConnectError("Name or service not known")) is FailureKind.NETWORK_ERROR
    assert classify_exception(httpx.ReadError("reset")) is FailureKind.NETWORK_ERROR
    assert classify_exception(httpx.RemoteProtocolError("bad")) is FailureKind.NETWORK_ERROR


def test_anything_else_is_unexpected():
    assert classify_exception(KeyError("x")) is FailureKind.UNEXPECTED


def test_self_referencing_chain_terminates():
    exc = httpx.ReadError("loop")
    exc.__context__ = exc
    assert classify_exception(exc) is FailureKind.NETWORK_ERROR


@pytest.mark.parametrize("kind", list(FailureKind))
def test_every_kind_has_a_description(kind):
    assert describe_failure(kind, 500)


def test_describe_mentions_status():
    assert "403" in describe_failure(FailureKind.SESSION_INVALID, 403)
    assert describe_failure(FailureKind.ENDPOINT_MISSING).startswith("Endpoint not found")


def test_make_error_defaults_and_data():
    err = make_error("oops")
    assert err == {"jsonrpc": "2.0", "id": None, "error": {"code": JSONRPC_INTERNAL_ERROR, "message": "oops"}}
    err2 = make_error("bad", code=-32099, data={"x": 1}, request_id="r")
    assert err2["error"]["data"] == {"x": 1}
    assert err2["id"] == "r"


@pytest.mark.parametrize(
    "line, expected",
    [
        ('{"jsonrpc":"2.0","id":1,"method":"x"}', 1),
        ('{"jsonrpc":"2.0","id":"abc","method":"x"}', "abc"),
        ('{"jsonrpc":"2.0","method":"notifications/initialized"}', None),
        ("[1,2]", None),
        ("not json", None),
    ],
)
def test_extract_request_id(line, expected):
    assert extract_request_id(line) == expected
