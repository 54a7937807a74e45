"""Logging setup and Actions runner helpers."""
