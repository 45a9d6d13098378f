"""Shred proxy bookkeeping: metrics, destinations, slot state and FEC set accounting."""

__version__ = "0.2.7"