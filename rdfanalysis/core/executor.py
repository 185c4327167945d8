"""
Pipeline execution for one fully specified protocol.
"""

from dataclasses import dataclass
from typing import Any

from .choices import Protocol
from .design import Design
from .errors import InvalidChoiceError, StepRuntimeError


@dataclass
class ExecutionResult:
    """Outcome of one pipeline run.

    Attributes:
        data: Payload returned by the last step (the input itself for an
            empty design).
        protocol: The choices actually used, in design order.
    """

    data: Any
    protocol: Protocol


def run_protocol(design: Design, data: Any, protocol: Any = None) -> ExecutionResult:
    """Run every step of *design* on *data* with the choices in *protocol*.

    The protocol is bound to the design first (see ``Design.bind``), so a
    malformed protocol fails before any step runs. Steps then execute in
    order, each receiving the previous step's output. The first error
    aborts the run; nothing is retried.

    Args:
        design: The pipeline to run.
        data: Input handed to the first step.
        protocol: One value per declared choice, in any form accepted by
            ``Design.bind``.

    Returns:
        ``ExecutionResult`` with the final data and the realised protocol.

    Raises:
        InvalidChoiceError: If the protocol does not fit the design.
        StepRuntimeError: If a step's transformation raises. ``position``
            holds the index of the failing step.
    """
    bound = design.bind(protocol)

    current = data
    realised = []
    for position, s in enumerate(design.steps):
        try:
            result = s.execute(current, bound.for_step(s.name))
        except (InvalidChoiceError, StepRuntimeError) as exc:
            exc.position = position
            raise
        current = result.data
        realised.extend(result.protocol_fragment)

    return ExecutionResult(data=current, protocol=Protocol(realised))
