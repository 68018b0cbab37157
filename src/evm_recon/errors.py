"""Exceptions surfaced to callers of the analysis pipeline."""


class InputError(ValueError):
    """Malformed hex/bytecode or address input."""


class AnalysisError(Exception):
    """Unexpected failure inside the orchestration sequence.

    Carries whatever report could be assembled before the failure.
    """

    def __init__(self, message: str, partial_report=None):
        super().__init__(message)
        self.partial_report = partial_report
