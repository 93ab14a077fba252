"""Immutable data model shared by the gateway and its observers."""
