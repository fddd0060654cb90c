"""Shared helpers: error taxonomy, structured logging, lenient JSON decoding."""
