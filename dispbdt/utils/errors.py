# dispbdt/utils/errors.py
class DispTrainingError(RuntimeError):
    """
    Root of every run-fatal condition.
    The CLI turns it into a logged message and exit code 1 (no traceback).
    """


class ConfigurationError(DispTrainingError):
    """
    Missing / unreadable input lists, empty telescope table,
    inconsistent telescope mask, invalid reconstruction method id.
    """


class UnknownTargetError(ConfigurationError):
    """
    Target selector that does not decode into a TargetLabel.
    Raised before any dataset work begins.
    """


class SplitPolicyError(DispTrainingError):
    """
    Too few training or testing entries for one telescope type.
    """


class DatasetNotFoundError(DispTrainingError):
    """
    Reload mode found no per-type dataset in the prebuilt directory.
    """


class EventAlignmentError(DispTrainingError):
    """
    A per-telescope stream disagrees with the array-level stream
    on the event number of a shared ordinal.
    """
