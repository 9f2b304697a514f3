# dispbdt/training/steps/dataset_build_step.py
from __future__ import annotations

from dispbdt import logs
from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.dataset_router_engine import DatasetRouter
from dispbdt.training.engines.disp_feature_engine import DispFeatureEngine
from dispbdt.training.engines.event_reader_engine import SynchronizedEventReader


class DatasetBuildStep(PipelineStep):
    """
    DatasetBuildStep (FINAL)

    Semantics:
    - one pass over all sources
    - every surviving (event, telescope) pair -> one record
      in the dataset of the telescope's type
    """

    stage = "dataset_build"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        if ctx.array_config is None:
            raise RuntimeError("[DatasetBuildStep] array configuration not loaded")

        cfg = ctx.cfg
        deriver = DispFeatureEngine(cfg.rec_id)
        router = DatasetRouter(ctx.datasets)

        with self.timed():
            with SynchronizedEventReader(
                ctx.sources,
                ctx.array_config,
                cfg.tel_type,
                batch_size=cfg.reader.batch_size,
                alignment_check=cfg.alignment_check,
                progress_every=cfg.progress_every,
                inst=self.inst,
            ) as reader:
                with self.inst.timer("dataset_build"):
                    for pair in reader.iter_pairs():
                        record = deriver.derive(pair.shower, pair.image, pair.telescope)
                        router.route(record, pair.telescope.tel_type)

                stats = reader.stats

        self.inst.metrics.record("events", stats.n_events)
        self.inst.metrics.record("pairs", stats.n_pairs)

        for _, dataset in ctx.datasets.items():
            logs.info(f"[DatasetBuildStep] {dataset.name}: {len(dataset)} entries")

        if len(ctx.datasets) == 0:
            logs.warning("[DatasetBuildStep] no training entries found")

        return ctx
