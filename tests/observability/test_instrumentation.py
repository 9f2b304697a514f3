#!filepath: tests/observability/test_instrumentation.py
import time

from loguru import logger

from dispbdt.observability.instrumentation import Instrumentation, NoOpInstrumentation
from dispbdt.observability.progress import ProgressReporter


def test_instrumentation_timer():
    inst = Instrumentation(enabled=True)

    with inst.timer("step_A"):
        time.sleep(0.01)

    assert "step_A" in inst.timeline
    assert inst.timeline["step_A"] > 0


def test_parent_timer_not_recorded():
    inst = Instrumentation(enabled=True)

    with inst.timer("parent", record=False):
        with inst.timer("leaf"):
            pass

    assert list(inst.timeline) == ["leaf"]


def test_instrumentation_metrics():
    inst = Instrumentation(enabled=True)
    inst.metrics.record("pairs", 123)
    inst.metrics.record("n_train", 240, tel_type=10408618)

    assert inst.metrics.metrics == {"pairs": 123, "n_train[10408618]": 240}


def test_noop_instrumentation():
    inst = NoOpInstrumentation()

    with inst.timer("x"):
        pass
    inst.metrics.record("pairs", 1)
    inst.progress.start("Task", 10)
    inst.generate_timeline_report("run")

    assert inst.timeline == {}
    assert inst.metrics.metrics == {}


def test_generate_timeline_report():
    inst = Instrumentation(enabled=True)

    with inst.timer("phase_X"):
        time.sleep(0.005)

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))

    inst.generate_timeline_report("BDTDisp_run")

    logger.remove(sink_id)

    output = "\n".join(captured)

    assert "phase_X" in output
    assert "BDTDisp_run" in output


def _capture(fn):
    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    try:
        fn()
    finally:
        logger.remove(sink_id)
    return "\n".join(captured)


def test_progress_reports_share_and_counters():
    progress = ProgressReporter(enabled=True)

    output = _capture(lambda: progress.update("EventReader", 250, 1000, pairs=480, skipped=3))

    assert "250/1000 events (25.0%) pairs=480 skipped=3" in output


def test_timeline_report_lists_metrics():
    inst = Instrumentation(enabled=True)
    with inst.timer("dataset_build"):
        pass
    inst.metrics.record("pairs", 42)

    output = _capture(lambda: inst.generate_timeline_report("BDTDisp_run"))

    assert "dataset_build" in output
    assert "pairs" in output and "42" in output
