# dispbdt/training/engines/model_report_engine.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from scipy.stats import pearsonr  # noqa: E402
from sklearn.metrics import (  # noqa: E402
    mean_absolute_error,
    mean_squared_error,
    r2_score,
)

from dispbdt import logs  # noqa: E402
from dispbdt.utils.filesystem import FileSystem  # noqa: E402


class ModelReportEngine:
    """
    ModelReportEngine (FINAL / FROZEN)

    Responsibility:
    - evaluate a regression model on the test part
    - persist the report (report.json / report.png)
    """

    REPORT_JSON = "report.json"
    REPORT_PNG = "report.png"
    HIST_BINS = 100

    # ------------------------------------------------------------------
    # Metrics (pure)
    # ------------------------------------------------------------------
    def evaluate(self, y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
        y_true = np.asarray(y_true, dtype=np.float64)
        y_pred = np.asarray(y_pred, dtype=np.float64)

        if len(y_true) == 0:
            raise ValueError("[ModelReportEngine] empty test dataset")

        residual = y_pred - y_true

        metrics: Dict[str, float] = {
            "mae": float(mean_absolute_error(y_true, y_pred)),
            "rmse": float(np.sqrt(mean_squared_error(y_true, y_pred))),
            "bias": float(np.mean(residual)),
            "containment_68": float(np.percentile(np.abs(residual), 68.0)),
        }

        # undefined for fewer than two points or a constant series
        if len(y_true) > 1 and np.std(y_true) > 0 and np.std(y_pred) > 0:
            metrics["r2"] = float(r2_score(y_true, y_pred))
            metrics["pearson"] = float(pearsonr(y_true, y_pred)[0])
        else:
            logs.info("[ModelReportEngine] constant target or prediction, skip r2 / pearson")

        return metrics

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @staticmethod
    def residual_range(residual: np.ndarray) -> Tuple[float, float]:
        """
        Histogram range of the residuals, widened when (nearly) constant.
        """
        lo, hi = float(np.min(residual)), float(np.max(residual))
        center = 0.5 * (lo + hi)
        half = max(0.5 * (hi - lo), 1.0e-3 * max(1.0, abs(center)))
        return center - half, center + half

    def write_json(self, report: Dict, out_dir: Path) -> Path:
        FileSystem.ensure_dir(out_dir)
        path = out_dir / self.REPORT_JSON
        FileSystem.safe_write(path, json.dumps(report, indent=2, ensure_ascii=False).encode("utf-8"))
        return path

    def plot(
        self,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        out_dir: Path,
        *,
        title: str,
        target: str,
        value_range: Optional[Tuple[float, float]] = None,
    ) -> Path:
        FileSystem.ensure_dir(out_dir)
        path = out_dir / self.REPORT_PNG

        fig, (ax_scatter, ax_hist) = plt.subplots(1, 2, figsize=(11, 4.5))

        ax_scatter.scatter(y_true, y_pred, s=2, alpha=0.4)
        lo, hi = value_range if value_range is not None else (
            float(np.min(y_true)), float(np.max(y_true))
        )
        ax_scatter.plot([lo, hi], [lo, hi], linestyle="--", color="k")
        ax_scatter.set_xlabel(f"true {target}")
        ax_scatter.set_ylabel(f"predicted {target}")

        residual = np.asarray(y_pred, dtype=np.float64) - np.asarray(y_true, dtype=np.float64)
        ax_hist.hist(residual, bins=self.HIST_BINS, range=self.residual_range(residual))
        ax_hist.axvline(0.0, linestyle="--", color="k")
        ax_hist.set_xlabel(f"predicted - true {target}")

        fig.suptitle(title)
        fig.tight_layout()
        fig.savefig(path)
        plt.close(fig)

        return path

    def write(
        self,
        report: Dict,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        out_dir: Path,
        *,
        title: str,
        target: str,
        value_range: Optional[Tuple[float, float]] = None,
    ) -> List[Path]:
        files = [
            self.write_json(report, out_dir),
            self.plot(y_true, y_pred, out_dir, title=title, target=target, value_range=value_range),
        ]
        logs.info(f"[ModelReportEngine] report saved: {out_dir}")
        return files
