"""
Training Engines (FINAL / FROZEN)

Pure compute units used by the training steps.

IMPORTANT:
- Engines own semantics, steps own orchestration.
- Engines never read the TrainingContext.
- Only the dataset router and the trainer touch storage.


Assembly engines
----------------

ArrayConfigEngine
    telescope table + inclusion mask

SynchronizedEventReader
    lock-step iteration over array-level and per-telescope streams

DispFeatureEngine
    one training record per surviving (event, telescope) pair

DatasetRouter
    per telescope type datasets, persist / reload


Training engines
----------------

SplitPolicyEngine
    train / test counts, fatal on undersized datasets

VariableSchemaEngine
    model inputs, spectators, target

ModelTrainEngine
    the trainer boundary; concrete engines live in `model/`
"""
