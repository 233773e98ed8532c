import errno
import socket

import pytest

from app.services import port_finder
from app.services.port_finder import PortConfigurationError, find_available_port, parse_port


@pytest.mark.parametrize("value", ["abc", "", None, -1, 65536, "70000"])
def test_invalid_port_values_are_rejected(value):
    with pytest.raises(PortConfigurationError):
        parse_port(value)


def test_numeric_strings_are_accepted():
    assert parse_port("8080") == 8080


def test_busy_preferred_port_moves_to_next_free_one():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        busy_port = blocker.getsockname()[1]

        chosen = find_available_port(busy_port, host="127.0.0.1")

    assert chosen > busy_port


def test_free_preferred_port_is_kept(monkeypatch):
    monkeypatch.setattr(port_finder, "_try_bind", lambda host, port: port)

    assert find_available_port(4000) == 4000


def test_exhausted_range_falls_back_to_ephemeral_port(monkeypatch):
    attempted = []

    def fake_bind(host, port):
        attempted.append(port)
        if port == 0:
            return 49152
        raise OSError(errno.EADDRINUSE, "Address already in use")

    monkeypatch.setattr(port_finder, "_try_bind", fake_bind)

    assert find_available_port(65533) == 49152
    assert attempted == [65533, 65534, 65535, 0]


def test_other_bind_errors_propagate(monkeypatch):
    def fake_bind(host, port):
        raise OSError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(port_finder, "_try_bind", fake_bind)

    with pytest.raises(OSError) as exc_info:
        find_available_port(80)
    assert exc_info.value.errno == errno.EACCES
