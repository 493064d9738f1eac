from unittest import mock

import pytest

from deftree.middlewares import error_counter, latency


class _Recorder:
    def __init__(self):
        self.records = []
        self._labels = ()

    def with_labels(self, *label_values):
        child = _Recorder()
        child.records = self.records
        child._labels = label_values
        return child

    def add(self, delta):
        self.records.append((self._labels, delta))

    def observe(self, value):
        self.records.append((self._labels, value))


def _echo(ctx, request):
    return (ctx, request)


def _fail(ctx, request):
    raise RuntimeError("boom")


def test_error_counter_passes_success_through():
    counter = _Recorder()
    wrapped = error_counter(counter)("Sum", _echo)
    assert wrapped("ctx", 42) == ("ctx", 42)
    assert counter.records == []


def test_error_counter_counts_failures_with_name():
    counter = _Recorder()
    wrapped = error_counter(counter)("Sum", _fail)
    with pytest.raises(RuntimeError, match="boom"):
        wrapped(None, None)
    with pytest.raises(RuntimeError):
        wrapped(None, None)
    assert counter.records == [(("endpoint", "Sum"), 1), (("endpoint", "Sum"), 1)]


def test_latency_observes_elapsed_seconds():
    histogram = _Recorder()
    with mock.patch("deftree.middlewares.time") as fake_time:
        fake_time.perf_counter.side_effect = [10.0, 12.5]
        wrapped = latency(histogram)("Echo", _echo)
        assert wrapped("ctx", "req") == ("ctx", "req")
    assert histogram.records == [(("endpoint", "Echo"), 2.5)]


def test_latency_observes_even_on_failure():
    histogram = _Recorder()
    wrapped = latency(histogram)("Broken", _fail)
    with pytest.raises(RuntimeError):
        wrapped(None, None)
    assert len(histogram.records) == 1
    labels, seconds = histogram.records[0]
    assert labels == ("endpoint", "Broken")
    assert seconds >= 0