"""Counters describing received, forwarded and decoded shreds."""

from __future__ import annotations

import logging
import threading
from typing import Any, Hashable

_log = logging.getLogger(__name__)

CONNECTION_COUNTERS = ("received", "success_forward", "fail_forward", "duplicate")

SERVICE_COUNTERS = (
    "recovered_count",
    "entry_count",
    "txn_count",
    "unknown_start_position_count",
    "fec_recovery_error_count",
    "bincode_deserialize_error_count",
    "unknown_start_position_error_count",
)

# Current counter -> cumulative counter that survives a reset.
CUMULATIVE_COUNTERS = {
    "received": "agg_received_cumulative",
    "success_forward": "agg_success_forward_cumulative",
    "fail_forward": "agg_fail_forward_cumulative",
    "duplicate": "duplicate_cumulative",
}

_ALL_COUNTERS = CONNECTION_COUNTERS + SERVICE_COUNTERS + tuple(CUMULATIVE_COUNTERS.values())


class ShredMetrics:
    """Thread-safe set of proxy counters.

    Counters are read with ``metrics["name"]`` and increased with :meth:`add`.
    """

    def __init__(self, enabled_grpc_service=False):
        self.enabled_grpc_service = bool(enabled_grpc_service)
        self._lock = threading.Lock()
        self._counters: dict[str, int] = dict.fromkeys(_ALL_COUNTERS, 0)
        # addr -> [discarded, not discarded]
        self._packets_received: dict[Hashable, list[int]] = {}

    def __getitem__(self, name: str) -> int:
        with self._lock:
            try:
                return self._counters[name]
            except KeyError:
                raise KeyError(f"unknown metric {name!r}") from None

    @property
    def packets_received(self) -> dict[Hashable, tuple[int, int]]:
        """Snapshot of (discarded, not discarded) packet counts per source address."""
        with self._lock:
            return {addr: (d, n) for addr, (d, n) in self._packets_received.items()}

    def add(self, name: str, amount: int = 1) -> int:
        """Increase counter ``name`` by ``amount`` and return its new value."""
        if amount < 0:
            raise ValueError("metric counters cannot be decreased")
        with self._lock:
            if name not in self._counters:
                raise KeyError(f"unknown metric {name!r}")
            self._counters[name] += amount
            return self._counters[name]

    def record_packet(self, addr: Hashable, discarded: bool) -> None:
        """Count one packet from ``addr``, as discarded or kept."""
        with self._lock:
            counts = self._packets_received.setdefault(addr, [0, 0])
            counts[0 if discarded else 1] += 1

    def _swap(self, name: str) -> int:
        value = self._counters[name]
        self._counters[name] = 0
        return value

    def report(self) -> list[dict[str, Any]]:
        """Emit the current datapoints, log them and return them.

        Connection counters are left in place; service counters and the
        per-address packet counts are cleared.
        """
        with self._lock:
            points: list[dict[str, Any]] = [
                {
                    "name": "shredstream_proxy-connection_metrics",
                    "tags": {},
                    "fields": {name: self._counters[name] for name in CONNECTION_COUNTERS},
                }
            ]
            if self.enabled_grpc_service:
                points.append(
                    {
                        "name": "shredstream_proxy-service_metrics",
                        "tags": {},
                        "fields": {name: self._swap(name) for name in SERVICE_COUNTERS},
                    }
                )
            for addr, (discarded, kept) in self._packets_received.items():
                points.append(
                    {
                        "name": "shredstream_proxy-receiver_stats",
                        "tags": {"addr": str(addr)},
                        "fields": {
                            "discarded_packets": discarded,
                            "not_discarded_packets": kept,
                        },
                    }
                )
            self._packets_received.clear()

        for point in points:
            _log.info("datapoint %s %s %s", point["name"], point["tags"], point["fields"])
        return points

    def reset(self) -> None:
        """Move the current connection counters into their cumulative totals."""
        with self._lock:
            for current, cumulative in CUMULATIVE_COUNTERS.items():
                self._counters[cumulative] += self._swap(current)