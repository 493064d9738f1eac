"""Endpoint middlewares that receive the name of the endpoint they wrap."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

Endpoint = Callable[[Any, Any], Any]
LabeledMiddleware = Callable[[str, Endpoint], Endpoint]


class _Counter(Protocol):
    def with_labels(self, *label_values: str) -> "_Counter": ...

    def add(self, delta: float) -> None: ...


class _Histogram(Protocol):
    def with_labels(self, *label_values: str) -> "_Histogram": ...

    def observe(self, value: float) -> None: ...


def error_counter(counter: _Counter) -> LabeledMiddleware:
    """Count failures of each endpoint, labelled with the endpoint's name."""

    def middleware(name: str, endpoint: Endpoint) -> Endpoint:
        def wrapped(ctx, request):
            try:
                return endpoint(ctx, request)
            except Exception:
                counter.with_labels("endpoint", name).add(1)
                raise

        return wrapped

    return middleware


def latency(histogram: _Histogram) -> LabeledMiddleware:
    """Record how many seconds each call takes, labelled with the endpoint name."""

    def middleware(name: str, endpoint: Endpoint) -> Endpoint:
        def wrapped(ctx, request):
            begin = time.perf_counter()
            try:
                return endpoint(ctx, request)
            finally:
                elapsed = time.perf_counter() - begin
                histogram.with_labels("endpoint", name).observe(elapsed)

        return wrapped

    return middleware