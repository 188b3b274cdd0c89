"""Watchlist server: catalog, audit history and personal watchlists."""

__version__ = "0.1.0"
