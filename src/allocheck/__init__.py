"""Validation and cross-entity consistency checking for client/worker/task data sets."""

__version__ = "0.1.0"
