"""
Runtime configuration for remote-calc.

Values come from the environment, optionally seeded from a ``.env`` file in
the working directory.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BACKEND_URL = "http://localhost:8081"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT = 5.0


@dataclass(slots=True)
class Settings:
    backend_url: str = DEFAULT_BACKEND_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT


def load_settings() -> Settings:
    """
    Build settings from environment variables.

    Recognized variables: BACKEND_URL, HOST, PORT, CALC_TIMEOUT.

    Raises:
        ValueError: If PORT or CALC_TIMEOUT is not numeric
    """
    load_dotenv()

    return Settings(
        backend_url=os.environ.get("BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/"),
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=int(os.environ.get("PORT", DEFAULT_PORT)),
        timeout=float(os.environ.get("CALC_TIMEOUT", DEFAULT_TIMEOUT)),
    )
