"""Metrics hook protocol and no-op default implementation.

mediaupload emits counters, timings, and gauges at key points of the
upload pipeline (requests, rejected files, saves, preloads).  By default a
:class:`NoopMetricsHook` is used so there is zero overhead.  Users can
supply their own implementation that satisfies the :class:`MetricsHook`
protocol through ``MediaUploadConfig(metrics=...)`` to route metrics to
Datadog, Prometheus, StatsD, or any other backend.

Usage::

    from mediaupload.observability.metrics import MetricsHook, NoopMetricsHook

    # Verify that a custom class satisfies the protocol at runtime:
    assert isinstance(my_backend, MetricsHook)

Emitted metric names:

* ``mediaupload.requests_total``          -- counter (tags: method, path, status)
* ``mediaupload.request_duration_ms``     -- timing (tags: method, path, status)
* ``mediaupload.upload_rejected_total``   -- counter (tag: code)
* ``mediaupload.upload_success_total``    -- counter
* ``mediaupload.upload_failure_total``    -- counter
* ``mediaupload.uploads_in_flight``       -- gauge
* ``mediaupload.preload_total``           -- counter (tag: status)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.  Implementations are free to translate these tags into whatever
    tagging mechanism their backend supports (e.g. Datadog tags, Prometheus
    labels, StatsD suffixes).
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g. ``"mediaupload.upload_success_total"``.
        value:
            Amount to increment by.  Defaults to ``1``.
        tags:
            Optional key-value tags for the data point.
        """
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a timing / duration metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g.
            ``"mediaupload.request_duration_ms"``.
        ms:
            Duration in milliseconds.
        tags:
            Optional key-value tags for the data point.
        """
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g. ``"mediaupload.uploads_in_flight"``.
        value:
            Current gauge value.
        tags:
            Optional key-value tags for the data point.
        """
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points.

    Used when no :class:`MetricsHook` backend is configured, so the
    transport, uploader and preloader never need
    ``if self._metrics is not None`` guards.
    """

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
