#!filepath: dispbdt/observability/timeline_reporter.py
from typing import Any, Dict, Optional

from dispbdt import logs


class TimelineReporter:
    """
    End-of-run report:
    - leaf timers (assembly, per-type training) with their share of the total
    - recorded run metrics
    """

    def __init__(
        self,
        timeline: Dict[str, float],
        run_label: str,
        metrics: Optional[Dict[str, Any]] = None,
    ):
        self.timeline = timeline
        self.run_label = run_label
        self.metrics = metrics or {}

    def print(self):
        logs.info(f"[Timeline] ===== {self.run_label} =====")

        total = sum(self.timeline.values())
        for name, sec in self.timeline.items():
            share = 100.0 * sec / total if total > 0 else 0.0
            logs.info(f"[Timeline] {str(name):<30} {sec:>8.3f}s {share:>5.1f}%")
        logs.info(f"[Timeline] {'total':<30} {total:>8.3f}s")

        for name, value in self.metrics.items():
            logs.info(f"[Timeline] {name:<30} {value}")

        logs.info("[Timeline] " + "=" * 43)
