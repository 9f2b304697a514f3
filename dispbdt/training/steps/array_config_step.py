# dispbdt/training/steps/array_config_step.py
from __future__ import annotations

from dispbdt import logs
from dispbdt.event_store.parquet_chain import read_input_list
from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.array_config_engine import ArrayConfigEngine
from dispbdt.utils.errors import ConfigurationError


class ArrayConfigStep(PipelineStep):
    """
    ArrayConfigStep (assembly mode only)

    Contract:
    - reads the input list   -> ctx.sources
    - reads the telescope table of the FIRST source
      and the optional array list -> ctx.array_config
    """

    stage = "array_config"

    def __init__(self, inst=None, engine: ArrayConfigEngine | None = None):
        super().__init__(inst)
        self.engine = engine if engine is not None else ArrayConfigEngine()

    def run(self, ctx: TrainingContext) -> TrainingContext:
        cfg = ctx.cfg
        if cfg.input_list is None:
            raise ConfigurationError("no input file list given")

        with self.timed():
            ctx.sources = read_input_list(cfg.input_list)
            ctx.array_config = self.engine.load(ctx.sources[0], cfg.array_list)

        logs.info(
            f"[ArrayConfigStep] {len(ctx.sources)} sources, "
            f"telescope types {ctx.array_config.tel_types(cfg.tel_type)}"
        )
        return ctx
