"""Shared helpers: logging, notifications and random selection."""
