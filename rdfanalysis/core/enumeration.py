"""
Choice-space enumeration.

The choice space of a design is the Cartesian product of every declared
choice domain. The first step's first choice varies slowest and the last
step's last choice varies fastest, so the enumeration order is fixed by the
design alone.
"""

import itertools
import math
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from ..utils.validators import validate_choice
from .choices import Choice, ChoiceSpec, Protocol
from .design import Design
from .errors import DesignSpaceError, InvalidChoiceError


class ChoiceSpace:
    """Restartable, deterministic sequence of every protocol of a design.

    All domains are checked on construction; a design with an empty or
    non-enumerable domain raises ``DesignSpaceError`` before any protocol
    is produced.

    Args:
        design: Design to enumerate.
        fixed: Optional ``{choice: value}`` pinning some choices to one
            value, which restricts the space to a slice.
    """

    def __init__(self, design: Design, fixed: Optional[Mapping[str, Any]] = None):
        self.design = design
        self._axes = self._build_axes(design, fixed or {})

    @staticmethod
    def _build_axes(design: Design, fixed: Mapping[str, Any]) -> List[Tuple[str, ChoiceSpec, Tuple[Any, ...]]]:
        axes = []
        for meta in design.describe():
            for spec in meta.choice_spec_list:
                axes.append((meta.name, spec, spec.check_domain(step=meta.name)))

        for key, value in fixed.items():
            try:
                step_name, spec = design.resolve_choice(key)
            except KeyError as exc:
                raise DesignSpaceError(f"Cannot fix choice: {exc.args[0]}") from None
            try:
                pinned = validate_choice(value, spec, step=step_name).value
            except InvalidChoiceError as exc:
                raise DesignSpaceError(f"Cannot fix choice '{key}': {exc}") from exc
            axes = [(s, sp, (pinned,) if (s, sp.name) == (step_name, spec.name) else dom) for s, sp, dom in axes]

        return axes

    def __len__(self) -> int:
        return math.prod(len(domain) for _, _, domain in self._axes)

    def __iter__(self) -> Iterator[Protocol]:
        for combo in itertools.product(*(domain for _, _, domain in self._axes)):
            yield Protocol(Choice(spec.name, value, spec.kind, step_name) for (step_name, spec, _), value in zip(self._axes, combo))

    @property
    def columns(self) -> List[str]:
        return self.design.choice_columns

    @property
    def domains(self) -> Dict[str, Tuple[Any, ...]]:
        """``{column: domain}`` for every axis, after pinning."""
        return {col: domain for col, (_, _, domain) in zip(self.columns, self._axes)}

    def to_frame(self) -> pd.DataFrame:
        """All protocols as a table of choice values, indexed by enumeration position."""
        rows = [p.values() for p in self]
        frame = pd.DataFrame(rows, columns=self.columns)
        frame.index.name = "protocol_id"
        return frame

    def __repr__(self):
        return f"ChoiceSpace({self.design!r}, size={len(self)})"


def enumerate_protocols(design: Design, fixed: Optional[Mapping[str, Any]] = None) -> ChoiceSpace:
    """Return the choice space of *design* (see ``ChoiceSpace``)."""
    return ChoiceSpace(design, fixed)


def count_protocols(design: Design) -> int:
    """Number of protocols in the full choice space of *design*."""
    return len(ChoiceSpace(design))
