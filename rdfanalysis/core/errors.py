"""
Exception types for the RDFAnalysis engine.

Single runs raise these to the caller. Batch operations (exhaustion and
power simulation) catch ``StepRuntimeError`` at the unit boundary and record
it on the output row instead.
"""

from typing import Optional

__all__ = [
    "RDFAnalysisError",
    "InvalidChoiceError",
    "DesignSpaceError",
    "StepRuntimeError",
]


class RDFAnalysisError(Exception):
    """Base class for all engine errors."""

    pass


class InvalidChoiceError(RDFAnalysisError, ValueError):
    """A choice value violates its declared ``ChoiceSpec``.

    Attributes:
        step: Name of the step whose choice failed (``None`` when validated
            outside a step).
        field: Name of the offending choice.
        reason: One of ``"missing"``, ``"wrong_kind"``, ``"out_of_domain"``
            or ``"unexpected"``.
        position: Index of the step in its design (set by the executor).
    """

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        field: Optional[str] = None,
        reason: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.step = step
        self.field = field
        self.reason = reason
        self.position = position
        super().__init__(message)

    def __reduce__(self):
        return (type(self), (self.args[0], self.step, self.field, self.reason, self.position))

    def __str__(self):
        msg = super().__str__()
        if self.step is None:
            return msg
        where = f"step '{self.step}'" if self.position is None else f"step {self.position} '{self.step}'"
        return f"{where}: {msg}"


class DesignSpaceError(RDFAnalysisError, ValueError):
    """The design cannot be enumerated (empty or non-finite domain, bad names)."""

    pass


class StepRuntimeError(RDFAnalysisError, RuntimeError):
    """A step's transformation raised while computing its output.

    Attributes:
        step: Name of the failing step.
        position: Index of the step in its design (set by the executor).
        original: The exception raised by the transformation.
    """

    def __init__(
        self,
        step: str,
        original: BaseException,
        position: Optional[int] = None,
    ):
        self.step = step
        self.original = original
        self.position = position
        super().__init__(str(original))

    def __reduce__(self):
        return (type(self), (self.step, self.original, self.position))

    @property
    def kind(self) -> str:
        """Class name of the underlying exception (e.g. ``"LinAlgError"``)."""
        return type(self.original).__name__

    def __str__(self):
        where = f"step '{self.step}'" if self.position is None else f"step {self.position} '{self.step}'"
        return f"{where} failed with {self.kind}: {self.original}"
