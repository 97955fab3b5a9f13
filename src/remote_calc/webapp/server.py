"""
Flask server for the remote-calc web UI.

Serves the calculator page, proxies calculation requests to the computation
service, and drives the page's InputStateMachine.
"""

import logging
from datetime import datetime, timezone

import httpx
from flask import Flask, jsonify, render_template, request

from ..client import DIRECT_PATHS, CalculationClient
from ..config import load_settings
from ..state_machine import InputStateMachine

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Configuration
_settings = load_settings()
app.config.update(
    BACKEND_URL=_settings.backend_url,
    CALC_TIMEOUT=_settings.timeout,
)


def _backend_client() -> httpx.Client:
    return httpx.Client(
        base_url=app.config["BACKEND_URL"],
        timeout=app.config["CALC_TIMEOUT"],
        transport=app.config.get("BACKEND_TRANSPORT"),
    )


def get_machine() -> InputStateMachine:
    """Return the page's calculator, creating it on first use."""
    machine = app.extensions.get("calculator")
    if machine is None:
        client = CalculationClient(
            app.config["BACKEND_URL"],
            *DIRECT_PATHS,
            timeout=app.config["CALC_TIMEOUT"],
            transport=app.config.get("BACKEND_ASYNC_TRANSPORT"),
        )
        machine = InputStateMachine(client)
        app.extensions["calculator"] = machine
    return machine


@app.route("/")
def index():
    """Render the calculator page."""
    return render_template("index.html", backend_url=app.config["BACKEND_URL"])


@app.route("/api/calculate", methods=["POST"])
def calculate():
    """
    Forward a calculation to the computation service.

    Expected JSON payload:
        {"a": 10, "b": 5, "operation": "add|subtract|multiply|divide"}

    Returns:
        The service's JSON response and status code, or
        503 {"error": "Backend service unavailable", ...} when it cannot be reached
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not data:
        return jsonify({"error": "No data provided"}), 400

    try:
        with _backend_client() as http:
            response = http.post(DIRECT_PATHS[0], json=data)
    except httpx.RequestError as e:
        logger.warning("Backend unreachable at %s: %s", app.config["BACKEND_URL"], e)
        return jsonify({
            "error": "Backend service unavailable",
            "details": "Cannot connect to calculation service",
        }), 503

    try:
        body = response.json()
    except ValueError as e:
        if not response.is_success:
            # Non-JSON error pages keep their status.
            return jsonify({"error": response.text or response.reason_phrase}), response.status_code
        logger.warning("Backend returned an undecodable response: %s", e)
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    return jsonify(body), response.status_code


@app.route("/health", methods=["GET"])
def health():
    """Liveness check for this server."""
    return jsonify({
        "status": "OK",
        "service": "frontend",
        "backend_url": app.config["BACKEND_URL"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@app.route("/api/backend-health", methods=["GET"])
def backend_health():
    """Pass through the computation service's health check."""
    unavailable = {
        "status": "ERROR",
        "service": "backend",
        "error": "Backend service unavailable",
    }

    try:
        with _backend_client() as http:
            response = http.get(DIRECT_PATHS[1])
        body = response.json()
    except (httpx.RequestError, ValueError) as e:
        logger.info("Backend health check failed: %s", e)
        return jsonify(unavailable), 503

    if not response.is_success:
        return jsonify(unavailable), 503

    return jsonify(body)


@app.route("/api/input", methods=["POST"])
async def press_button():
    """
    Handle a calculator button press.

    Expected JSON payload:
        {
            "action": "digit|decimal|operator|equals|clear",
            "value": "..."  // digit, or operator name/symbol
        }

    Returns:
        JSON snapshot of the calculator state
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not data:
        return jsonify({"error": "No data provided"}), 400

    machine = get_machine()
    try:
        await machine.press(data.get("action", ""), data.get("value"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(machine.snapshot())


@app.route("/api/key", methods=["POST"])
async def press_key():
    """
    Handle a keyboard key.

    Expected JSON payload:
        {"key": "7"}

    Returns:
        JSON snapshot plus "prevent_default" for the page's key handler
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not isinstance(data.get("key"), str):
        return jsonify({"error": "key is required"}), 400

    machine = get_machine()
    prevent_default = await machine.handle_key(data["key"])

    return jsonify({**machine.snapshot(), "prevent_default": prevent_default})


@app.route("/api/state", methods=["GET"])
def get_state():
    return jsonify(get_machine().snapshot())


@app.route("/api/status", methods=["GET"])
async def refresh_status():
    """Re-check backend connectivity and return the updated snapshot."""
    machine = get_machine()
    await machine.refresh_status()
    return jsonify(machine.snapshot())


@app.route("/api/reset", methods=["POST"])
def reset():
    """Reset calculator to initial state."""
    machine = get_machine()
    machine.clear()
    return jsonify(machine.snapshot())


def main():
    """Run the Flask development server."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the remote-calc web server")
    parser.add_argument(
        "--host",
        default=_settings.host,
        help=f"Host to bind to (default: {_settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=_settings.port,
        help=f"Port to bind to (default: {_settings.port})",
    )
    parser.add_argument(
        "--backend-url",
        default=_settings.backend_url,
        help=f"Computation service URL (default: {_settings.backend_url})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.config["BACKEND_URL"] = args.backend_url.rstrip("/")
    app.extensions.pop("calculator", None)

    print("Calculator frontend server starting...")
    print(f"Backend API URL: {app.config['BACKEND_URL']}")
    print(f"Access at: http://{args.host}:{args.port}")

    app.run(host=args.host, port=args.port, debug=False)


if __name__ == "__main__":
    main()
