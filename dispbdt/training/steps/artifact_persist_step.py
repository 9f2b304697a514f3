# dispbdt/training/steps/artifact_persist_step.py
from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone

import joblib

from dispbdt import __version__, logs
from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.utils.filesystem import FileSystem


class ArtifactPersistStep(PipelineStep):
    """
    ArtifactPersistStep (FINAL / FROZEN)

    Semantics:
    - persists the model of ONE telescope type next to the trainer's report
    - no train_result (failed type) -> nothing written
    """

    stage = "artifact_persist"

    MODEL_FILE = "model.joblib"
    ARTIFACT_FILE = "artifact.json"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        result = ctx.train_result
        tel_type = ctx.tel_type

        if result is None:
            logs.info(f"[ArtifactPersistStep] skip telescope type {tel_type} (no model)")
            return ctx

        artifact_dir = FileSystem.ensure_dir(ctx.pm.model_dir(ctx.target.file_stem, tel_type))

        # -----------------------------
        # Persist model
        # -----------------------------
        model_path = artifact_dir / self.MODEL_FILE
        joblib.dump(result.model, model_path)

        # -----------------------------
        # Persist metadata
        # -----------------------------
        schema = ctx.schema
        artifact_meta = {
            "run_id": ctx.run_id,
            "version": __version__,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "spec": {
                "method": f"BDT_{tel_type}",
                "trainer": ctx.cfg.trainer,
                "tel_type": tel_type,
                "rec_id": ctx.cfg.rec_id,
            },
            "target": {
                "label": ctx.target.name,
                "column": ctx.target.column,
                "valid_range": ctx.target.valid_range,
            },
            "variables": list(schema.variables),
            "spectators": list(schema.spectators),
            "feature_names": list(result.feature_names),
            "split": asdict(ctx.split),
            "quality_cut": ctx.cfg.quality_cut,
            "method_options": ctx.cfg.method_options,
            "metrics": dict(result.metrics),
            "report_files": [p.name for p in result.report_files],
        }

        meta_path = artifact_dir / self.ARTIFACT_FILE
        FileSystem.safe_write(meta_path, json.dumps(artifact_meta, indent=2).encode("utf-8"))

        ctx.artifacts[tel_type] = artifact_dir
        logs.info(f"[ArtifactPersistStep] model_artifact={artifact_dir}")

        return ctx
