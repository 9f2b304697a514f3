#!filepath: tests/training/engines/test_model_report_engine.py
import json

import numpy as np
import pytest

from dispbdt.training.engines.model_report_engine import ModelReportEngine


def test_perfect_prediction():
    y = np.linspace(0.0, 2.0, 50)

    metrics = ModelReportEngine().evaluate(y, y)

    assert metrics["mae"] == pytest.approx(0.0)
    assert metrics["rmse"] == pytest.approx(0.0)
    assert metrics["bias"] == pytest.approx(0.0)
    assert metrics["r2"] == pytest.approx(1.0)
    assert metrics["pearson"] == pytest.approx(1.0)


def test_bias_and_containment():
    y = np.zeros(100)
    pred = np.full(100, 0.5)

    metrics = ModelReportEngine().evaluate(y, pred)

    assert metrics["bias"] == pytest.approx(0.5)
    assert metrics["containment_68"] == pytest.approx(0.5)
    # constant series: correlation undefined
    assert "r2" not in metrics
    assert "pearson" not in metrics


def test_empty_test_set():
    with pytest.raises(ValueError):
        ModelReportEngine().evaluate(np.array([]), np.array([]))


def test_write_report(tmp_path):
    engine = ModelReportEngine()
    y = np.linspace(0.0, 1.0, 20)

    files = engine.write({"metrics": {"mae": 0.1}}, y, y + 0.1, tmp_path / "r",
                         title="BDT_1", target="disp")

    assert [f.name for f in files] == ["report.json", "report.png"]
    assert json.loads(files[0].read_text())["metrics"]["mae"] == 0.1
    assert files[1].stat().st_size > 0


def test_residual_range_widened_for_constant_residuals():
    lo, hi = ModelReportEngine.residual_range(np.full(10, 0.1) + np.linspace(0.0, 1e-16, 10))

    assert lo < 0.1 < hi
    assert hi - lo == pytest.approx(2.0e-3)


def test_residual_range_covers_spread():
    lo, hi = ModelReportEngine.residual_range(np.array([-1.0, 0.5, 3.0]))

    assert (lo, hi) == pytest.approx((-1.0, 3.0))


def test_plot_nearly_constant_residuals(tmp_path):
    # float rounding makes (y + 0.1) - y differ in the last bits only
    y = np.linspace(0.0, 1.0, 200)

    path = ModelReportEngine().plot(y, y + 0.1, tmp_path, title="BDT_1", target="disp")

    assert path.name == "report.png"
    assert path.stat().st_size > 0
