# dispbdt/training/engines/split_policy_engine.py
from __future__ import annotations

import math
from dataclasses import dataclass

from dispbdt import logs
from dispbdt.utils.errors import SplitPolicyError


@dataclass(frozen=True)
class TrainTestSplit:
    """
    Train / test entry counts for one telescope type.

    n_train + n_test == n_entries (undamped, used for the policy check)
    n_train_used / n_test_used: damped counts handed to the trainer
    """
    n_entries: int
    train_fraction: float
    n_train: int
    n_test: int
    n_train_used: int
    n_test_used: int


class SplitPolicyEngine:
    """
    SplitPolicyEngine

    Policy:
      - n_train = floor(N * train_fraction), n_test = N - n_train
      - n_train <= min_events -> fatal (fraction too small)
      - n_test  <= min_events -> fatal (fraction too large)
      - both counts damped by `damping` afterwards; the check above
        is evaluated on the undamped counts
    """

    def __init__(self, *, min_events: int = 100, damping: float = 0.8):
        self.min_events = min_events
        self.damping = damping

    def plan(self, n_entries: int, train_fraction: float) -> TrainTestSplit:
        n_train = int(math.floor(n_entries * train_fraction))
        n_test = n_entries - n_train

        if n_train <= self.min_events:
            raise SplitPolicyError(
                f"train fraction {train_fraction} is too small for this many events: "
                f"only {n_train} of {n_entries} entries selected for training"
            )
        if n_test <= self.min_events:
            raise SplitPolicyError(
                f"train fraction {train_fraction} is too large for this many events: "
                f"only {n_test} of {n_entries} entries selected for testing"
            )

        split = TrainTestSplit(
            n_entries=n_entries,
            train_fraction=train_fraction,
            n_train=n_train,
            n_test=n_test,
            n_train_used=int(n_train * self.damping),
            n_test_used=int(n_test * self.damping),
        )

        logs.info(
            f"[SplitPolicy] entries={n_entries} fraction={train_fraction} "
            f"train={split.n_train_used} test={split.n_test_used} "
            f"(undamped {n_train}/{n_test})"
        )
        return split
