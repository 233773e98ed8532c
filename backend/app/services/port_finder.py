"""Pick a listen port for the gateway.

Probes upward from the preferred port and falls back to an OS-assigned
ephemeral port once the valid range is exhausted.
"""

import errno
import logging
import socket
from typing import Union

logger = logging.getLogger(__name__)

MAX_PORT = 65535


class PortConfigurationError(Exception):
    """The configured port is not a usable port number."""


def parse_port(value: Union[int, str]) -> int:
    """Validate a configured port value (0 means any free port)."""
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise PortConfigurationError(f"Port must be a number, got {value!r}")
    if not 0 <= port <= MAX_PORT:
        raise PortConfigurationError(f"Port must be between 0 and {MAX_PORT}, got {port}")
    return port


def _try_bind(host: str, port: int) -> int:
    """Bind and release a socket; returns the port the OS actually gave us."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, port))
        return sock.getsockname()[1]


def find_available_port(preferred: Union[int, str], host: str = "0.0.0.0") -> int:
    """Return the first free port at or above ``preferred``."""
    start = parse_port(preferred)
    if start == 0:
        return _try_bind(host, 0)

    for port in range(start, MAX_PORT + 1):
        try:
            bound = _try_bind(host, port)
        except OSError as e:
            if e.errno != errno.EADDRINUSE:
                raise
            logger.info(f"Port {port} is in use, trying {port + 1}")
            continue
        if bound != start:
            logger.info(f"Preferred port {start} unavailable, using {bound}")
        return bound

    logger.warning(f"No free port between {start} and {MAX_PORT}, asking the OS for one")
    return _try_bind(host, 0)
