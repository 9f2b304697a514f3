"""
Training Doctrine (FINAL / FROZEN)

One run == one target label, one model per telescope type.

------------------------------------------------------------
Stage 1: Dataset assembly (once per run)
------------------------------------------------------------

Either
- assemble: read the telescope table, walk the array-level and
  per-telescope streams in lock-step, derive one record per
  surviving (event, telescope) pair, route it by telescope type
or
- reload: read a previously persisted aggregate dataset.

Exactly one of the two per run. The aggregate dataset is
persisted in both cases.

------------------------------------------------------------
Stage 2: Per-type training
------------------------------------------------------------

For every telescope type present, in ascending order:
- split policy (fatal on undersized datasets)
- variable schema (inputs, spectators, one target)
- trainer call with opaque quality cut and method options
- artifact persistence

A trainer failure of one type never stops the other types.
A split-policy violation stops the run.
"""
