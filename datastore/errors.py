"""Errors raised by the measurement store."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for measurement store failures."""


class StorageUnavailable(StoreError):
    """The backing database could not be opened or initialised."""


class StoreClosed(StoreError):
    """An operation was attempted after the store was closed."""


class WriteFailed(StoreError):
    """A single append could not be committed."""


class QueryFailed(StoreError):
    """A read query could not be executed."""
