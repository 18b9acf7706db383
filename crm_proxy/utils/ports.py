"""Listening port selection."""

import errno
import socket

from crm_proxy.utils.logging import get_logger

logger = get_logger("ports")


def port_is_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError as exc:
            if exc.errno == errno.EADDRINUSE:
                return False
            raise
    return True


def find_available_port(host: str, start_port: int, max_attempts: int = 10) -> int:
    """Return the first bindable port in ``[start_port, start_port + max_attempts)``.

    :raises RuntimeError: If every candidate port is in use
    """
    for port in range(start_port, start_port + max_attempts):
        if port_is_free(host, port):
            return port
        logger.warning("Port %d is in use, trying %d...", port, port + 1)
    raise RuntimeError(
        f"Could not find available port after {max_attempts} attempts"
    )
