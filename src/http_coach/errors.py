"""Exception hierarchy for the audit pipeline."""

from __future__ import annotations


class HttpCoachError(Exception):
    """Base class for all errors raised by :mod:`http_coach`."""


class ValidationError(HttpCoachError):
    """The ``url`` parameter is missing or not an ``https://`` URL.

    ``str(err)`` is the short reason returned to the client.
    """


class UpstreamFailure(HttpCoachError):
    """A downstream collaborator (target site, model, store) failed."""


class FetchError(UpstreamFailure):
    """The target URL could not be fetched at the transport level."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(reason)
        self.url = url


class HistoryCorruptError(UpstreamFailure):
    """A stored history value is present but is not a JSON array."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored history under {key!r} is corrupt: {reason}")
        self.key = key


def describe_error(err: BaseException) -> str:
    """Return the message of *err*, or its class name when the message is empty."""
    return str(err) or type(err).__name__
