# dispbdt/training/pipeline.py
from __future__ import annotations

from typing import List

from dispbdt import logs
from dispbdt.config.training_config import TrainingConfig
from dispbdt.observability.instrumentation import Instrumentation
from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.target import TargetLabel
from dispbdt.utils.path import PathManager


class TrainingPipeline:
    """
    TrainingPipeline (FINAL / FROZEN)

    Semantics:
    - setup steps run once (array config, dataset build OR load, persist)
    - pipeline owns the telescope-type iteration (ascending type order)
    - per-type steps train and persist one model per type
    - a failed type is recorded in ctx.failed_types, the others still train
    """

    def __init__(
            self,
            *,
            setup_steps: List[PipelineStep],
            per_type_steps: List[PipelineStep],
            pm: PathManager,
            inst: Instrumentation,
            cfg: TrainingConfig,
            target: TargetLabel,
    ):
        self.setup_steps = setup_steps
        self.per_type_steps = per_type_steps
        self.pm = pm
        self.inst = inst
        self.cfg = cfg
        self.target = target

    def run(self, run_id: str) -> TrainingContext:
        logs.info(f"[TrainingPipeline] START run_id={run_id} target={self.target}")

        ctx = TrainingContext(
            run_id=run_id,
            target=self.target,
            cfg=self.cfg,
            inst=self.inst,
            pm=self.pm,
        )

        # ------------------------------
        # Setup (once)
        # ------------------------------
        for step in self.setup_steps:
            ctx = step.run(ctx)

        tel_types = ctx.datasets.tel_types
        logs.info(f"[TrainingPipeline] number of telescope types: {len(tel_types)}")

        # ------------------------------
        # One model per telescope type
        # ------------------------------
        for tel_type in tel_types:
            ctx.reset_type_state(tel_type)

            for step in self.per_type_steps:
                ctx = step.run(ctx)

        logs.info(
            f"[TrainingPipeline] DONE trained={sorted(ctx.artifacts)} "
            f"failed={sorted(ctx.failed_types)}"
        )
        return ctx
