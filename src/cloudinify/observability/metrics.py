"""Pluggable metrics for upload calls.

Pass any object with ``increment`` and ``timing`` methods as
``CloudinifyConfig.metrics`` to receive these data points:

* ``cloudinify.requests_total`` (counter; tags method, mode, status)
* ``cloudinify.request_duration_ms`` (timing; tags method, mode, status)
* ``cloudinify.upload_success_total`` (counter; tag mode)
* ``cloudinify.upload_failure_total`` (counter; tags mode, code)

``status`` is the HTTP status code, or ``"error"`` when no response
arrived.  ``code`` is the :class:`~cloudinify.errors.ErrorCode` value.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

Tags = dict[str, str]


@runtime_checkable
class MetricsHook(Protocol):
    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        """Record one duration sample, in milliseconds."""
        ...


class NoopMetricsHook:
    """Discards everything.  Used when no hook is configured."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        return None


def resolve_metrics(hook: MetricsHook | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return NoopMetricsHook() if hook is None else hook
