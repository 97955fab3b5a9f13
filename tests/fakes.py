"""Shared test doubles for the computation service."""

import json

import httpx


def fake_backend(request: httpx.Request) -> httpx.Response:
    """Minimal computation service: add/subtract/multiply/divide over JSON."""
    if request.url.path == "/health":
        return httpx.Response(200, json={"status": "OK", "service": "calculator-backend"})

    body = json.loads(request.content)
    a, b, op = body["a"], body["b"], body["operation"]
    if op == "divide" and b == 0:
        return httpx.Response(400, json={"result": 0, "error": "division by zero"})
    result = {"add": a + b, "subtract": a - b, "multiply": a * b, "divide": a / b if b else 0}[op]
    return httpx.Response(200, json={"result": result, "operation": op, "a": a, "b": b})


def refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)
