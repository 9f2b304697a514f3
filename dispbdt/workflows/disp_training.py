# dispbdt/workflows/disp_training.py
from __future__ import annotations

from datetime import datetime

from dispbdt.config.app_config import AppConfig
from dispbdt.config.training_config import TrainingConfig
from dispbdt.observability.instrumentation import Instrumentation
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.registry import resolve_model_train_engine
from dispbdt.training.engines.split_policy_engine import SplitPolicyEngine
from dispbdt.training.engines.variable_schema_engine import VariableSchemaEngine
from dispbdt.training.pipeline import TrainingPipeline
from dispbdt.training.steps.array_config_step import ArrayConfigStep
from dispbdt.training.steps.artifact_persist_step import ArtifactPersistStep
from dispbdt.training.steps.dataset_build_step import DatasetBuildStep
from dispbdt.training.steps.dataset_load_step import DatasetLoadStep
from dispbdt.training.steps.dataset_persist_step import DatasetPersistStep
from dispbdt.training.steps.model_train_step import ModelTrainStep
from dispbdt.training.target import TargetLabel
from dispbdt.utils.path import PathManager


def build_disp_training(
    cfg: TrainingConfig | None = None,
    inst: Instrumentation | None = None,
) -> TrainingPipeline:
    """
    Disp Training Workflow (FINAL / FROZEN)

    assemble : ArrayConfig -> DatasetBuild -> DatasetPersist
    reload   : DatasetLoad -> DatasetPersist
    per type : ModelTrain -> ArtifactPersist
    """

    if cfg is None:
        cfg = AppConfig.load().training
    if inst is None:
        inst = Instrumentation()

    # fail fast: unknown target / trainer before any dataset work
    target = TargetLabel.parse(cfg.target)
    engine = resolve_model_train_engine(cfg)

    pm = PathManager(cfg.output_dir)

    if cfg.reload_mode:
        setup_steps = [
            DatasetLoadStep(inst),
        ]
    else:
        setup_steps = [
            ArrayConfigStep(inst),
            DatasetBuildStep(inst),
        ]
    setup_steps.append(DatasetPersistStep(inst))

    return TrainingPipeline(
        setup_steps=setup_steps,
        per_type_steps=[
            ModelTrainStep(
                inst=inst,
                engine=engine,
                split_policy=SplitPolicyEngine(min_events=cfg.min_events, damping=cfg.damping),
                schema_engine=VariableSchemaEngine(cfg.astri_tel_type),
            ),
            ArtifactPersistStep(inst),
        ],
        pm=pm,
        inst=inst,
        cfg=cfg,
        target=target,
    )


def make_run_id(cfg: TrainingConfig) -> str:
    stem = PathManager.dataset_name(TargetLabel.parse(cfg.target).file_stem, cfg.tel_type)
    return f"{stem}_{datetime.now():%Y%m%dT%H%M%S}"


def run_disp_training(cfg: TrainingConfig | None = None) -> TrainingContext:
    if cfg is None:
        cfg = AppConfig.load().training

    inst = Instrumentation()
    pipeline = build_disp_training(cfg, inst)

    run_id = make_run_id(cfg)
    ctx = pipeline.run(run_id)

    inst.generate_timeline_report(run_id)
    return ctx
