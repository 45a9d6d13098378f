# shredproxy

Building blocks for a shred forwarding proxy. The package provides
thread-safe proxy metrics, a swappable set of forwarding destinations with
periodic discovery over HTTP, and the per-slot state used to decide when a
run of data shreds forms a complete segment and when an FEC set has enough
shreds to try recovery.

It uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `shredproxy.metrics`

`ShredMetrics(enabled_grpc_service=False)` holds named counters.

- `add(name, amount=1)` increases a counter and returns its new value; an
  unknown name raises `KeyError`, a negative amount raises `ValueError`.
- `metrics["received"]` reads a counter.
- `record_packet(addr, discarded)` counts one packet per source address,
  as discarded or kept; `packets_received` returns a snapshot of
  `(discarded, not_discarded)` per address.
- `report()` logs and returns a list of datapoints (dicts with `name`,
  `tags` and `fields`). Connection counters are reported and left in place;
  service counters are reported and cleared only when `enabled_grpc_service`
  is true; per-address packet counts are reported and cleared.
- `reset()` moves `received`, `success_forward`, `fail_forward` and
  `duplicate` into their cumulative counterparts (`agg_received_cumulative`,
  `agg_success_forward_cumulative`, `agg_fail_forward_cumulative`,
  `duplicate_cumulative`) and sets them to zero.

### `shredproxy.status`

- `ShredStatus` — `UNKNOWN`, `NOT_DATA_COMPLETE`, `DATA_COMPLETE`.
- `ShredInfo` — a frozen dataclass with a shred's slot, index, FEC set
  index, data/coding kind, completion flags, coding header counts and data.
  `is_data_complete()` is true for a data shred flagged data-complete or
  last-in-slot.
- `is_stale_slot(slot, highest_slot_seen)` — true when the slot is more than
  50 slots behind the highest slot seen.

### `shredproxy.tracker`

`ShredsStateTracker(size=32768)` records, for one slot, which data shreds
have arrived, their status, which FEC sets are recovered and which positions
are deshredded. `update(shred)` returns the shred's index when it is new and
`None` otherwise; `is_completed(shred)` and `mark_deshredded(shred)` query
and set the finished state. Positions outside the tracker raise `ValueError`.

### `shredproxy.segments`

`get_indexes(tracker, index)` returns a `Segment(start, end, unknown_start)`
covering the complete segment that holds `index`, or `None`. The segment ends
at the first data-complete shred at or after `index`; an unknown or
deshredded shred on the way discards it. An unknown shred to the left is
accepted and sets `unknown_start`.

### `shredproxy.fecinfo`

`get_data_shred_info(shreds)` counts the data and coding shreds of one FEC
set and returns a `FecSetInfo`. `FecSetInfo.ready_to_recover(received=None)`
is true when the expected data count is known, at least that many shreds are
held, and some data shreds are still missing.

### `shredproxy.destinations`

- `DestinationSet(addresses=())` — a thread-safe list of `(ip, port)`
  addresses replaced whole with `store` and read with `load`.
- `resolve_hostname_port("host:port")` — returns `((ip, port), "host:port")`;
  bracketed IPv6 hosts are accepted.
- `parse_discovered_ips(payload)` — parses a JSON array of IP strings.
- `fetch_unioned_destinations(url, port, static_dest_sockets)` — fetches the
  discovery URL, pairs each IP with `port`, appends the static destinations
  (resolved again, dropping those that no longer resolve) and removes repeats.
- `start_destination_refresh_thread(url, port, static_dest_sockets,
  destinations, exit_event)` — a daemon thread that refreshes `destinations`
  every 30 seconds until `exit_event` is set, keeping the old list when a
  fetch fails.

Errors in resolving, fetching or parsing raise `ShredstreamProxyError`.

## Example

```python
from shredproxy.fecinfo import get_data_shred_info
from shredproxy.segments import get_indexes
from shredproxy.status import ShredInfo
from shredproxy.tracker import ShredsStateTracker

shreds = [
    ShredInfo(slot=1, index=0, fec_set_index=0),
    ShredInfo(slot=1, index=1, fec_set_index=0, data_complete=True),
]
tracker = ShredsStateTracker(size=8)
for shred in shreds:
    tracker.update(shred)

print(get_indexes(tracker, 0))  # Segment(start=0, end=1, unknown_start=False)
print(get_data_shred_info(shreds).ready_to_recover())  # False: nothing missing
```

## What this package does not do

There is no command to run and no running proxy: the package does not bind
UDP sockets, receive or send shred packets, deduplicate packets, or serve
decoded entries. It also does not parse shred payloads, perform Reed-Solomon
recovery or decode entries; callers supply `ShredInfo` values themselves.