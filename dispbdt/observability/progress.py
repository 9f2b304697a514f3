#!filepath: dispbdt/observability/progress.py
from dispbdt import logs


class ProgressReporter:
    """
    Event-loop progress through logs.

    One line per report: processed events, share of the total and the
    loop counters passed by the caller (pairs, skipped ...).
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    @staticmethod
    def _counters(counters) -> str:
        return " ".join(f"{k}={v}" for k, v in counters.items())

    def start(self, task: str, total: int):
        if not self.enabled:
            return
        logs.info(f"[Progress] {task}: looping over {total} events")

    def update(self, task: str, current: int, total: int, **counters):
        if not self.enabled:
            return
        share = 100.0 * current / total if total else 100.0
        line = f"[Progress] {task}: {current}/{total} events ({share:.1f}%)"
        if counters:
            line += f" {self._counters(counters)}"
        logs.info(line)

    def done(self, task: str, **counters):
        if not self.enabled:
            return
        line = f"[Progress] {task} done"
        if counters:
            line += f" {self._counters(counters)}"
        logs.info(line)
