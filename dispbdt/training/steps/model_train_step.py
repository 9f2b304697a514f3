# dispbdt/training/steps/model_train_step.py
from __future__ import annotations

from dispbdt import logs
from dispbdt.pipeline.step import PipelineStep
from dispbdt.training.context import TrainingContext
from dispbdt.training.engines.model_train_engine import ModelTrainEngine, TrainRequest
from dispbdt.training.engines.split_policy_engine import SplitPolicyEngine
from dispbdt.training.engines.variable_schema_engine import VariableSchemaEngine


class ModelTrainStep(PipelineStep):
    """
    ModelTrainStep (per telescope type)

    Contract:
    - consumes ctx.tel_type and its dataset
    - produces ctx.split, ctx.schema, ctx.train_result
    - SplitPolicyError propagates (run-fatal)
    - any trainer exception -> ctx.failed_types[tel_type], train_result stays None
    """

    stage = "model_train"

    def __init__(
        self,
        *,
        inst=None,
        engine: ModelTrainEngine,
        split_policy: SplitPolicyEngine,
        schema_engine: VariableSchemaEngine,
    ):
        super().__init__(inst)
        self.engine = engine
        self.split_policy = split_policy
        self.schema_engine = schema_engine

    def run(self, ctx: TrainingContext) -> TrainingContext:
        tel_type = ctx.tel_type
        dataset = ctx.datasets.get(tel_type)
        table = dataset.to_table()

        method_name = f"BDT_{tel_type}"
        logs.info(
            f"[ModelTrainStep] {method_name}: {table.num_rows} entries, "
            f"target {ctx.target.column}"
        )

        ctx.split = self.split_policy.plan(table.num_rows, ctx.cfg.train_fraction)
        ctx.schema = self.schema_engine.build(tel_type, ctx.target)

        request = TrainRequest(
            tel_type=tel_type,
            method_name=method_name,
            table=table,
            schema=ctx.schema,
            split=ctx.split,
            quality_cut=ctx.cfg.quality_cut,
            method_options=ctx.cfg.method_options,
            seed=ctx.cfg.seed,
            report_dir=ctx.pm.model_dir(ctx.target.file_stem, tel_type),
        )

        logs.info(f"[ModelTrainStep] quality cuts applied: {request.quality_cut}")
        logs.info(f"[ModelTrainStep] method options: {request.method_options}")

        try:
            with self.timed(), self.inst.timer(f"train_{tel_type}"):
                ctx.train_result = self.engine.train(request)
        except Exception as e:
            logs.exception(f"[ModelTrainStep] training failed for telescope type {tel_type}: {e}")
            ctx.failed_types[tel_type] = str(e)
            return ctx

        self.inst.metrics.record("n_train", ctx.train_result.n_train, tel_type=tel_type)
        self.inst.metrics.record("n_test", ctx.train_result.n_test, tel_type=tel_type)
        return ctx
