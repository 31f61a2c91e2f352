"""Shared types, JSON and fixture helpers, and query string decoding."""
