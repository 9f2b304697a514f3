# dispbdt/training/engines/model/bdt_regressor_train_engine.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd
import pyarrow as pa
from sklearn.decomposition import PCA
from sklearn.ensemble import (
    AdaBoostRegressor,
    BaggingRegressor,
    GradientBoostingRegressor,
)
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import MinMaxScaler, QuantileTransformer
from sklearn.tree import DecisionTreeRegressor

from dispbdt import logs
from dispbdt.training.engines.model.method_options import MethodOptions
from dispbdt.training.engines.model_report_engine import ModelReportEngine
from dispbdt.training.engines.model_train_engine import ModelTrainEngine, TrainRequest
from dispbdt.training.engines.train_result import TrainResult
from dispbdt.utils.parquet_utils import ParquetAtomicWriter

_NOT = re.compile(r"!(?!=)")


class SklearnBDTRegressorTrainEngine(ModelTrainEngine):
    """
    Boosted decision tree regression (batch, fit on a finite dataset).

    Procedure per telescope type:
      1. quality cut (pandas query; C-style && || ! accepted)
      2. target restricted to the label's valid range, non-finite rows dropped
      3. damped train / test counts scaled by the preselection efficiency
      4. random split (seeded)
      5. fit Pipeline(variable transforms + boosted trees)
      6. evaluate on the test part, write the report

    Method options (colon separated):
      NTrees, MaxDepth, MinNodeSize, BoostType (AdaBoost | AdaBoostR2 | Grad | Bagging),
      AdaBoostBeta, AdaBoostR2Loss, Shrinkage, UseBaggedBoost, BaggedSampleFraction,
      VarTransform (N | G | P | D, comma separated)
    Any other option is ignored with a log line.
    """

    DEFAULT_N_TREES = 800
    DEFAULT_MAX_DEPTH = 3

    SUPPORTED_OPTIONS = {
        "ntrees",
        "maxdepth",
        "minnodesize",
        "boosttype",
        "adaboostbeta",
        "adaboostr2loss",
        "shrinkage",
        "usebaggedboost",
        "baggedsamplefraction",
        "vartransform",
    }

    PREDICTIONS_FILE = "test_predictions.parquet"

    def __init__(self, cfg, report: ModelReportEngine | None = None):
        super().__init__(cfg)
        self.report = report if report is not None else ModelReportEngine()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @staticmethod
    def translate_cut(cut: str | None) -> str:
        """
        "size>1&&loss<0.2" -> "size>1 and loss<0.2"
        """
        if not cut:
            return ""
        expr = cut.replace("&&", " and ").replace("||", " or ")
        expr = _NOT.sub(" not ", expr)
        return " ".join(expr.split())

    def select(self, df: pd.DataFrame, request: TrainRequest) -> pd.DataFrame:
        cut = self.translate_cut(request.quality_cut)
        if cut:
            df = df.query(cut, engine="python")

        target = request.schema.target
        valid_range = target.valid_range
        if valid_range is not None:
            lo, hi = valid_range
            df = df[(df[target.column] >= lo) & (df[target.column] <= hi)]

        return df

    @staticmethod
    def features(df: pd.DataFrame, variables: Tuple[str, ...]) -> pd.DataFrame:
        """
        Evaluate variable expressions ("tgrad_x*tgrad_x") into feature columns.
        """
        return pd.DataFrame(
            {expr: df.eval(expr, engine="python").astype(np.float64) for expr in variables},
            index=df.index,
        )

    # ------------------------------------------------------------------
    # Estimator
    # ------------------------------------------------------------------
    @staticmethod
    def _min_samples_leaf(options: MethodOptions) -> Dict[str, Any]:
        value = options.get("MinNodeSize")
        if value is None:
            return {}
        # percent of the training sample
        fraction = float(value.rstrip("%")) / 100.0
        if not 0.0 < fraction < 1.0:
            raise ValueError(f"MinNodeSize={value} out of range")
        return {"min_samples_leaf": fraction}

    @staticmethod
    def _transforms(options: MethodOptions, n_train: int, seed: int) -> List[Tuple[str, Any]]:
        raw = options.get("VarTransform")
        if not raw:
            return []

        steps: List[Tuple[str, Any]] = []
        for token in raw.split(","):
            kind = token.strip().split("_", 1)[0].upper()
            if kind in ("N", "NORM"):
                steps.append(("norm", MinMaxScaler(feature_range=(-1.0, 1.0))))
            elif kind in ("G", "GAUSS"):
                steps.append((
                    "gauss",
                    QuantileTransformer(
                        output_distribution="normal",
                        n_quantiles=max(1, min(1000, n_train)),
                        random_state=seed,
                    ),
                ))
            elif kind in ("P", "PCA"):
                steps.append(("pca", PCA()))
            elif kind in ("D", "DECO"):
                steps.append(("deco", PCA(whiten=True)))
            elif kind:
                raise ValueError(f"unsupported VarTransform '{token}'")
        return steps

    def build_estimator(self, options: MethodOptions, *, n_train: int, seed: int) -> Pipeline:
        n_trees = options.get_int("NTrees", self.DEFAULT_N_TREES)
        max_depth = options.get_int("MaxDepth", self.DEFAULT_MAX_DEPTH)
        boost_type = (options.get("BoostType") or "AdaBoost").lower()
        leaf = self._min_samples_leaf(options)

        if boost_type in ("adaboost", "adaboostr2", "realadaboost"):
            loss = (options.get("AdaBoostR2Loss") or "Quadratic").lower()
            loss = {"quadratic": "square"}.get(loss, loss)
            model = AdaBoostRegressor(
                estimator=DecisionTreeRegressor(max_depth=max_depth, random_state=seed, **leaf),
                n_estimators=n_trees,
                learning_rate=options.get_float("AdaBoostBeta", 0.5),
                loss=loss,
                random_state=seed,
            )
        elif boost_type == "grad":
            subsample = 1.0
            if options.get_bool("UseBaggedBoost", False):
                subsample = options.get_float("BaggedSampleFraction", 0.6)
            model = GradientBoostingRegressor(
                n_estimators=n_trees,
                max_depth=max_depth,
                learning_rate=options.get_float("Shrinkage", 1.0),
                subsample=subsample,
                random_state=seed,
                **leaf,
            )
        elif boost_type == "bagging":
            model = BaggingRegressor(
                estimator=DecisionTreeRegressor(max_depth=max_depth, random_state=seed, **leaf),
                n_estimators=n_trees,
                max_samples=options.get_float("BaggedSampleFraction", 1.0),
                random_state=seed,
            )
        else:
            raise ValueError(f"unsupported BoostType '{options.get('BoostType')}'")

        return Pipeline(self._transforms(options, n_train, seed) + [("bdt", model)])

    # ------------------------------------------------------------------
    # Train
    # ------------------------------------------------------------------
    def train(self, request: TrainRequest) -> TrainResult:
        schema = request.schema
        target = schema.target
        options = MethodOptions(request.method_options)

        ignored = [key for key in options if key.lower() not in self.SUPPORTED_OPTIONS]
        if ignored:
            logs.info(f"[{request.method_name}] ignoring method options {ignored}")

        df = request.table.to_pandas()
        n_all = len(df)

        missing = [c for c in schema.referenced_columns() if c not in df.columns]
        if missing:
            raise ValueError(f"[{request.method_name}] dataset lacks columns {missing}")

        # --------------------------------------------------------------
        # Preselection
        # --------------------------------------------------------------
        selected = self.select(df, request)
        X_all = self.features(selected, schema.variables)
        y_all = selected[target.column].astype(np.float64)

        finite = np.isfinite(X_all.to_numpy()).all(axis=1) & np.isfinite(y_all.to_numpy())
        X_all, y_all, selected = X_all[finite], y_all[finite], selected[finite]
        n_selected = len(selected)

        efficiency = n_selected / n_all if n_all else 0.0
        n_train = int(request.split.n_train_used * efficiency)
        n_test = int(request.split.n_test_used * efficiency)

        logs.info(
            f"[{request.method_name}] preselection {n_selected}/{n_all} "
            f"(eff={efficiency:.3f}) train={n_train} test={n_test}"
        )

        if n_train < 1 or n_test < 1:
            raise ValueError(
                f"[{request.method_name}] no entries left for training/testing "
                f"after quality cut ({n_selected} of {n_all} selected)"
            )

        # --------------------------------------------------------------
        # Random split
        # --------------------------------------------------------------
        rng = np.random.default_rng(request.seed)
        order = rng.permutation(n_selected)
        train_idx = order[:n_train]
        test_idx = order[n_train:n_train + n_test]

        X_train = X_all.iloc[train_idx].to_numpy()
        y_train = y_all.iloc[train_idx].to_numpy()
        X_test = X_all.iloc[test_idx].to_numpy()
        y_test = y_all.iloc[test_idx].to_numpy()

        # --------------------------------------------------------------
        # Fit / evaluate
        # --------------------------------------------------------------
        model = self.build_estimator(options, n_train=n_train, seed=request.seed)
        model.fit(X_train, y_train)

        y_pred = model.predict(X_test)
        metrics = self.report.evaluate(y_test, y_pred)

        counts = {
            "n_entries": n_all,
            "n_selected": n_selected,
            "preselection_efficiency": efficiency,
            "n_train": n_train,
            "n_test": n_test,
        }

        logs.info(
            f"[{request.method_name}] target={target.column} "
            + " ".join(f"{k}={v:.4g}" for k, v in metrics.items())
        )

        # --------------------------------------------------------------
        # Report
        # --------------------------------------------------------------
        report = {
            "method": request.method_name,
            "tel_type": request.tel_type,
            "target": target.column,
            "variables": list(schema.variables),
            "spectators": list(schema.spectators),
            "quality_cut": request.quality_cut,
            "method_options": request.method_options,
            "counts": counts,
            "metrics": metrics,
        }
        report_files = self.report.write(
            report,
            y_test,
            y_pred,
            request.report_dir,
            title=request.method_name,
            target=target.column,
            value_range=target.valid_range,
        )
        report_files.append(
            self._write_predictions(selected.iloc[test_idx], y_pred, request)
        )

        return TrainResult(
            model=model,
            metrics={**counts, **metrics},
            n_train=n_train,
            n_test=n_test,
            feature_names=list(schema.variables),
            report_files=report_files,
        )

    # ------------------------------------------------------------------
    def _write_predictions(
        self,
        test: pd.DataFrame,
        y_pred: np.ndarray,
        request: TrainRequest,
    ):
        """
        Test entries with spectators, target and prediction.
        """
        columns = ["runNumber", "eventNumber", "tel"]
        columns += [c for c in request.schema.spectators if c not in columns]
        columns.append(request.schema.target_column)

        out = test[columns].reset_index(drop=True)
        out["prediction"] = np.asarray(y_pred, dtype=np.float32)

        path = request.report_dir / self.PREDICTIONS_FILE
        ParquetAtomicWriter.write_table(pa.Table.from_pandas(out, preserve_index=False), path)
        return path
