# dispbdt/training/steps/dataset_load_step.py
from __future__ import annotations

from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.dataset_router_engine import DatasetRouter
from dispbdt.utils.errors import DatasetNotFoundError


class DatasetLoadStep(PipelineStep):
    """
    DatasetLoadStep (reload mode)

    Semantics:
    - replaces ctx.datasets by a previously persisted aggregate dataset
    - nothing loaded -> DatasetNotFoundError (run-fatal)
    """

    stage = "dataset_load"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        cfg = ctx.cfg
        router = DatasetRouter(ctx.datasets)

        with self.timed(), self.inst.timer("dataset_load"):
            found = router.load_existing(ctx.target, cfg.tel_type, cfg.dataset_dir)

        if not found:
            raise DatasetNotFoundError(
                f"error reading training trees for {ctx.target.file_stem} "
                f"(telescope type {cfg.tel_type}) from {cfg.dataset_dir}"
            )

        return ctx
