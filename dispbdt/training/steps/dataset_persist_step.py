# dispbdt/training/steps/dataset_persist_step.py
from __future__ import annotations

from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.dataset_router_engine import DatasetRouter


class DatasetPersistStep(PipelineStep):
    """
    DatasetPersistStep

    Writes the aggregate dataset (one dispTree_<type>.parquet per type),
    in assembly and in reload mode alike.
    """

    stage = "dataset_persist"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        router = DatasetRouter(ctx.datasets)

        with self.timed(), self.inst.timer("dataset_persist"):
            ctx.dataset_files = router.write(ctx.pm, ctx.target, ctx.cfg.tel_type)

        return ctx
