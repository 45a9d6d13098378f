"""Destinations that received shreds are forwarded to, and their discovery."""

from __future__ import annotations

import ipaddress
import json
import logging
import socket
import threading
import urllib.error
import urllib.request
from typing import Iterable, Sequence

_log = logging.getLogger(__name__)

REFRESH_INTERVAL = 30.0
HTTP_TIMEOUT = 10.0

SocketAddr = tuple[str, int]


class ShredstreamProxyError(Exception):
    """Raised when the proxy cannot resolve, fetch or parse a destination."""


class DestinationSet:
    """Thread-safe list of destination addresses that can be swapped whole."""

    def __init__(self, addresses=()):
        self._lock = threading.Lock()
        self._addresses: tuple[SocketAddr, ...] = tuple(addresses)

    def load(self) -> tuple[SocketAddr, ...]:
        """Return the current destinations."""
        with self._lock:
            return self._addresses

    def store(self, addresses: Iterable[SocketAddr]) -> None:
        """Replace the destinations."""
        new = tuple(addresses)
        with self._lock:
            self._addresses = new

    def __len__(self) -> int:
        return len(self.load())


def _split_host_port(hostname_port: str) -> tuple[str, int]:
    host, sep, port_text = hostname_port.rpartition(":")
    if not sep or not host:
        raise ShredstreamProxyError(f"invalid socket address {hostname_port!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ShredstreamProxyError(f"invalid socket address {hostname_port!r}")
    if not port_text.isdigit():
        raise ShredstreamProxyError(f"invalid port in {hostname_port!r}")
    port = int(port_text)
    if port > 0xFFFF:
        raise ShredstreamProxyError(f"invalid port in {hostname_port!r}")
    return host, port


def resolve_hostname_port(hostname_port: str) -> tuple[SocketAddr, str]:
    """Resolve ``host:port`` to an address, keeping the original text.

    The text is kept so the name can be resolved again on later refreshes.
    """
    host, port = _split_host_port(hostname_port)
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as err:
        raise ShredstreamProxyError(f"Could not find destination {hostname_port}: {err}") from err
    if not infos:
        raise ShredstreamProxyError(f"Could not find destination {hostname_port}")
    sockaddr = infos[0][4]
    ip = str(ipaddress.ip_address(sockaddr[0].split("%", 1)[0]))
    return (ip, int(sockaddr[1])), hostname_port


def parse_discovered_ips(payload: bytes | str) -> list[str]:
    """Parse a JSON array of IP address strings into normalised addresses."""
    try:
        values = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as err:
        raise ShredstreamProxyError(f"SerdeJsonError {err}") from err
    if not isinstance(values, list):
        raise ShredstreamProxyError("SerdeJsonError expected a JSON array of IP addresses")
    ips = []
    for value in values:
        if not isinstance(value, str):
            raise ShredstreamProxyError(f"SerdeJsonError invalid IP address {value!r}")
        try:
            ips.append(str(ipaddress.ip_address(value)))
        except ValueError as err:
            raise ShredstreamProxyError(f"SerdeJsonError {err}") from err
    return ips


def _fetch(url: str) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=HTTP_TIMEOUT) as response:
            return response.read()
    except urllib.error.HTTPError as err:
        with err:
            return err.read()
    except (urllib.error.URLError, OSError, ValueError) as err:
        raise ShredstreamProxyError(f"ReqwestError {err}") from err


def fetch_unioned_destinations(
    endpoint_discovery_url: str,
    discovered_endpoints_port: int,
    static_dest_sockets: Sequence[tuple[SocketAddr, str]],
) -> list[SocketAddr]:
    """Return discovered endpoints followed by the static ones, without repeats.

    Static destinations are resolved again, since their addresses may have
    changed; those that no longer resolve are left out.
    """
    body = _fetch(endpoint_discovery_url)
    try:
        ips = parse_discovered_ips(body)
    except ShredstreamProxyError:
        _log.warning("Failed to parse json from: %r", body.decode("utf-8", errors="replace"))
        raise

    static: list[SocketAddr] = []
    for _addr, hostname_port in static_dest_sockets:
        try:
            static.append(resolve_hostname_port(hostname_port)[0])
        except ShredstreamProxyError:
            continue

    discovered = [(ip, discovered_endpoints_port) for ip in ips]
    return list(dict.fromkeys(discovered + static))


def start_destination_refresh_thread(
    endpoint_discovery_url: str,
    discovered_endpoints_port: int,
    static_dest_sockets: Sequence[tuple[SocketAddr, str]],
    destinations: DestinationSet,
    exit_event: threading.Event,
) -> threading.Thread:
    """Start a thread that refreshes ``destinations`` until ``exit_event`` is set."""
    static = list(static_dest_sockets)

    def run() -> None:
        socket_count = len(static)
        while not exit_event.wait(REFRESH_INTERVAL):
            try:
                new = fetch_unioned_destinations(
                    endpoint_discovery_url, discovered_endpoints_port, static
                )
            except ShredstreamProxyError as err:
                _log.warning("Failed to fetch from discovery service, retrying. Error: %s", err)
                _log.warning(
                    "datapoint shredstream_proxy-destination_refresh_error "
                    "prev_unioned_dest_count=%d errors=1 error_str=%s",
                    socket_count,
                    err,
                )
            else:
                _log.info("Sending shreds to %d destinations: %s", len(new), new)
                socket_count = len(new)
                destinations.store(new)
            _log.info(
                "datapoint shredstream_proxy-destination_refresh_stats destination_count=%d",
                socket_count,
            )

    thread = threading.Thread(target=run, name="ssPxyDstRefresh", daemon=True)
    thread.start()
    return thread