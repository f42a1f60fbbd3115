import re
from datetime import timedelta
from typing import Tuple

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|us|µs|ns|s|m|h)")

_UNIT_SECONDS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 1e-3,
    "us": 1e-6,
    "µs": 1e-6,
    "ns": 1e-9,
}


def parse_duration(value: str) -> timedelta:
    """
    Parses a duration string such as '5s', '500ms' or '1m30s' into a timedelta.
    A bare number is interpreted as seconds.

    Raises:
        ValueError: If the string is empty or not a valid duration.
    """
    if value is None or not str(value).strip():
        raise ValueError("Duration must not be empty.")

    text = str(value).strip().lower()
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"Invalid duration: '{value}'. Use a format like '500ms', '5s' or '1m30s'.")
    return timedelta(seconds=total)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Splits a 'host:port' listen address. An empty host (':9091') binds all interfaces.
    """
    host, sep, port = (address or "").rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address: '{address}'. Use a format like ':9091' or '127.0.0.1:9091'.")

    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"Listen port out of range: {port_number}")

    host = host.strip("[]") or "0.0.0.0"
    return host, port_number
