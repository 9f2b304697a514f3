#!filepath: dispbdt/observability/instrumentation.py
from __future__ import annotations

import time
from dataclasses import dataclass
from contextlib import contextmanager
from collections import OrderedDict
from typing import Dict

from dispbdt.observability.progress import ProgressReporter
from dispbdt.observability.metrics import MetricRecorder
from dispbdt.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Instrumentation (leaf-only accounting + parent scope).

    Rules:
    1. the timeline only records leaf timers (record=True)
    2. step / parent timers only bound wall time (record=False)
    3. record=False timers have no side effects
    4. no logging on the hot path
    """

    enabled: bool = True

    def __post_init__(self):
        self.progress = ProgressReporter(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)

        # timeline: OrderedDict[leaf_name, elapsed_seconds]
        self.timeline: Dict[str, float] = OrderedDict()

    def timer(self, name: str, *, record: bool = True):
        """
        Context-manager timer.

        Parameters
        ----------
        name : str
            timer name (timeline key)
        record : bool
            - True  : leaf, written to the timeline
            - False : parent scope, wall time only
        """
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            start = time.perf_counter()
            try:
                yield
            finally:
                if record:
                    inst.timeline[name] = time.perf_counter() - start

        return _ctx()

    def generate_timeline_report(self, run_label: str):
        TimelineReporter(self.timeline, run_label, self.metrics.metrics).print()


class NoOpInstrumentation:
    """Used when observability is disabled."""

    def __init__(self):
        self.progress = ProgressReporter(enabled=False)
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = OrderedDict()

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, run_label: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
