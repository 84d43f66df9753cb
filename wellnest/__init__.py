"""Wellnest — activity ledger, streak engine and journal store for a wellness diary."""

__version__ = "0.1.0"
