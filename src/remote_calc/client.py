"""
HTTP client for the remote calculation service.

Every call is attempted exactly once; failures come back as classified
CalculationResult values instead of exceptions.
"""

import logging
from typing import Optional

import httpx

from .calc_types import (
    CalculationRequest,
    CalculationResult,
    ConnectivityStatus,
    FailureKind,
    OperatorKind,
)

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE_MESSAGE = "Backend service unavailable"

# Paths on the computation service itself and on the proxy in front of it.
DIRECT_PATHS = ("/calculate", "/health")
PROXY_PATHS = ("/api/calculate", "/api/backend-health")


class CalculationClient:
    """Performs one remote arithmetic computation per call."""

    def __init__(
        self,
        base_url: str,
        calculate_path: str = PROXY_PATHS[0],
        health_path: str = PROXY_PATHS[1],
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.calculate_path = calculate_path
        self.health_path = health_path
        self.timeout = timeout
        self._transport = transport

    def _session(self) -> httpx.AsyncClient:
        # A fresh client per call keeps the object usable from any event loop.
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def compute(self, a: float, b: float, op: OperatorKind) -> CalculationResult:
        """
        Ask the remote service to combine two operands.

        Args:
            a: Left-hand operand
            b: Right-hand operand
            op: Operator to apply

        Returns:
            A successful result carrying the value, or a failure classified as
            computation_rejected, service_unavailable or transport_error
        """
        request = CalculationRequest(float(a), float(b), OperatorKind(op))
        logger.debug("Calculating: %s %s %s", request.a, request.operator.symbol, request.b)

        try:
            async with self._session() as http:
                response = await http.post(self.calculate_path, json=request.to_payload())
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.warning("Calculation service unreachable at %s: %s", self.base_url, e)
            return CalculationResult.failure(
                FailureKind.SERVICE_UNAVAILABLE, SERVICE_UNAVAILABLE_MESSAGE
            )
        except httpx.HTTPError as e:
            logger.warning("Transport error talking to %s: %s", self.base_url, e)
            return CalculationResult.failure(FailureKind.TRANSPORT_ERROR, str(e) or type(e).__name__)

        # The proxy (or a gateway in front of it) reports an unreachable backend as 503,
        # with or without a JSON body.
        if response.status_code == 503:
            error = _error_field(response)
            logger.warning("Calculation service unavailable: %s", error)
            return CalculationResult.failure(
                FailureKind.SERVICE_UNAVAILABLE, error or SERVICE_UNAVAILABLE_MESSAGE
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Undecodable response from %s: %s", self.base_url, e)
            return CalculationResult.failure(
                FailureKind.TRANSPORT_ERROR, f"Invalid response from calculation service: {e}"
            )

        if not isinstance(data, dict):
            return CalculationResult.failure(
                FailureKind.TRANSPORT_ERROR, "Invalid response from calculation service"
            )

        error = data.get("error")

        if response.is_success and not error:
            value = data.get("result")
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return CalculationResult.failure(
                    FailureKind.TRANSPORT_ERROR, f"Missing numeric result in response: {data!r}"
                )
            logger.debug("Result: %s", value)
            return CalculationResult.success(float(value))

        message = error or f"Calculation failed (HTTP {response.status_code})"
        logger.warning("Calculation rejected: %s", message)
        return CalculationResult.failure(FailureKind.COMPUTATION_REJECTED, str(message))

    async def check_health(self) -> ConnectivityStatus:
        """Probe the health endpoint and describe the connection."""
        try:
            async with self._session() as http:
                response = await http.get(self.health_path)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.info("Health check failed: %s", e)
            return ConnectivityStatus(False, "Backend disconnected")

        if response.is_success and isinstance(data, dict) and data.get("status") == "OK":
            return ConnectivityStatus(True, "Backend connected")
        return ConnectivityStatus(False, "Backend disconnected")


def _error_field(response: httpx.Response) -> Optional[str]:
    """The "error" member of a JSON body, or None when there is none."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None
