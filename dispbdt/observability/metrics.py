#!filepath: dispbdt/observability/metrics.py
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dispbdt import logs


@dataclass
class MetricRecorder:
    """
    Run-level counters (events, pairs) and per telescope type counters
    (n_train / n_test), keyed "<name>" or "<name>[<tel_type>]".
    """

    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def key(name: str, tel_type: Optional[int] = None) -> str:
        return name if tel_type is None else f"{name}[{tel_type}]"

    def record(self, name: str, value: Any, *, tel_type: Optional[int] = None):
        if not self.enabled:
            return
        key = self.key(name, tel_type)
        self.metrics[key] = value
        logs.info(f"[Metric] {key} = {value}")
