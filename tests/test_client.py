"""Tests for the remote calculation client."""

import asyncio
import json

import httpx

from fakes import fake_backend, refused
from remote_calc.calc_types import FailureKind, OperatorKind
from remote_calc.client import DIRECT_PATHS, CalculationClient
from remote_calc.state_machine import InputStateMachine


def _client(handler, paths=DIRECT_PATHS) -> CalculationClient:
    return CalculationClient(
        "http://backend.test", *paths, transport=httpx.MockTransport(handler)
    )


def test_compute_success():
    result = asyncio.run(_client(fake_backend).compute(6, 3, OperatorKind.DIVIDE))
    assert result.ok
    assert result.value == 2.0


def test_compute_sends_wire_payload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"result": 12})

    asyncio.run(_client(handler).compute(3, 4, OperatorKind.MULTIPLY))
    assert seen["path"] == "/calculate"
    assert seen["body"] == {"a": 3.0, "b": 4.0, "operation": "multiply"}


def test_divide_by_zero_is_rejected():
    result = asyncio.run(_client(fake_backend).compute(5, 0, OperatorKind.DIVIDE))
    assert not result.ok
    assert result.failure_kind is FailureKind.COMPUTATION_REJECTED
    assert result.message == "division by zero"


def test_unreachable_service():
    result = asyncio.run(_client(refused).compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.SERVICE_UNAVAILABLE
    assert result.message == "Backend service unavailable"


def test_timeout_counts_as_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = asyncio.run(_client(handler).compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.SERVICE_UNAVAILABLE


def test_proxy_503_counts_as_unavailable():
    def handler(request):
        return httpx.Response(503, json={"error": "Backend service unavailable"})

    client = CalculationClient("http://proxy.test", transport=httpx.MockTransport(handler))
    result = asyncio.run(client.compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.SERVICE_UNAVAILABLE


def test_plain_text_503_counts_as_unavailable():
    """A gateway 503 without a JSON body still means the service is down."""
    def handler(request):
        return httpx.Response(503, text="Service Unavailable")

    result = asyncio.run(_client(handler).compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.SERVICE_UNAVAILABLE
    assert result.message == "Backend service unavailable"


def test_other_transport_errors():
    def handler(request):
        raise httpx.RemoteProtocolError("peer closed connection", request=request)

    result = asyncio.run(_client(handler).compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.TRANSPORT_ERROR
    assert "peer closed connection" in result.message


def test_non_json_response_is_transport_error():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    result = asyncio.run(_client(handler).compute(2, 3, OperatorKind.ADD))
    assert result.failure_kind is FailureKind.TRANSPORT_ERROR


def test_check_health():
    status = asyncio.run(_client(fake_backend).check_health())
    assert status.ok

    status = asyncio.run(_client(refused).check_health())
    assert not status.ok


def test_machine_against_backend():
    """2 + 3 + 4 = over HTTP shows 9."""
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return fake_backend(request)

    machine = InputStateMachine(_client(handler))

    async def run():
        for key in ["2", "+", "3", "+", "4", "="]:
            await machine.handle_key(key)

    asyncio.run(run())
    assert machine.display == "9"
    assert [(r["a"], r["b"], r["operation"]) for r in requests] == [
        (2.0, 3.0, "add"),
        (5.0, 4.0, "add"),
    ]
