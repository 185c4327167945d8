"""
Designs and step registries.

A ``Design`` is an immutable, ordered pipeline of steps. It owns no data:
it only orders steps and knows how their choice specs line up into one
protocol. A ``StepRegistry`` maps step names to implementations and is
built explicitly by the hosting application.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..utils.validators import MISSING, UNEXPECTED, validate_choices
from .choices import Choice, ChoiceSpec, Protocol
from .errors import DesignSpaceError, InvalidChoiceError
from .step import Step, StepMetadata


class StepRegistry:
    """Name-to-step mapping used to assemble designs.

    Example:
        >>> registry = StepRegistry()
        >>> registry.register(EstimateModel())
        >>> design = registry.design(["estimate_model"])
    """

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps: Dict[str, Step] = {}
        for s in steps:
            self.register(s)

    def register(self, step: Step, replace: bool = False) -> Step:
        """Add *step* under its name. Returns the step so it can decorate."""
        if not isinstance(step, Step):
            raise TypeError(f"Only Step instances can be registered, got {type(step).__name__}")
        if step.name in self._steps and not replace:
            raise ValueError(f"A step named '{step.name}' is already registered")
        self._steps[step.name] = step
        return step

    def get(self, name: str) -> Step:
        """Return the step registered under *name*."""
        try:
            return self._steps[name]
        except KeyError:
            available = ", ".join(sorted(self._steps)) or "none"
            raise KeyError(f"No step named '{name}' is registered (available: {available})") from None

    def design(self, names: Sequence[str]) -> "Design":
        """Build a ``Design`` from step names, in the given order."""
        return Design([self.get(n) for n in names])

    @property
    def names(self) -> List[str]:
        return list(self._steps)

    def __contains__(self, name) -> bool:
        return name in self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps.values())


class Design:
    """Ordered, immutable sequence of steps.

    Args:
        steps: Steps in execution order. Names must be unique.
        name: Optional label used in printed summaries.

    Raises:
        DesignSpaceError: If two steps share a name.
    """

    def __init__(self, steps: Iterable[Step] = (), name: Optional[str] = None):
        steps = tuple(steps)
        for s in steps:
            if not isinstance(s, Step):
                raise TypeError(f"Design steps must be Step instances, got {type(s).__name__}")
        names = [s.name for s in steps]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise DesignSpaceError(f"Step names must be unique within a design, duplicated: {', '.join(duplicates)}")
        self._steps = steps
        self.name = name

    @classmethod
    def from_registry(cls, registry: StepRegistry, names: Sequence[str], name: Optional[str] = None) -> "Design":
        """Resolve *names* against *registry* into a design."""
        return cls([registry.get(n) for n in names], name=name)

    # =========================================================================
    # Sequence behaviour
    # =========================================================================

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self._steps]

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __getitem__(self, index) -> Step:
        return self._steps[index]

    def __repr__(self):
        return f"Design([{', '.join(self.step_names)}])"

    # =========================================================================
    # Choice layout
    # =========================================================================

    def describe(self) -> List[StepMetadata]:
        """Metadata of every step, in order."""
        return [s.describe() for s in self._steps]

    def choice_specs(self) -> List[Tuple[str, ChoiceSpec]]:
        """Flat ``(step_name, spec)`` list in protocol order."""
        return [(meta.name, spec) for meta in self.describe() for spec in meta.choice_spec_list]

    @property
    def choice_columns(self) -> List[str]:
        """Table column for each choice, aligned with ``choice_specs()``.

        A choice is labelled by its own name unless another step declares a
        choice with the same name, in which case both are ``step.choice``.
        """
        specs = self.choice_specs()
        counts: Dict[str, int] = {}
        for _, spec in specs:
            counts[spec.name] = counts.get(spec.name, 0) + 1
        return [spec.name if counts[spec.name] == 1 else f"{step_name}.{spec.name}" for step_name, spec in specs]

    def resolve_choice(self, key: str) -> Tuple[str, ChoiceSpec]:
        """Find the ``(step_name, spec)`` addressed by a column or ``step.choice`` key.

        Raises:
            KeyError: If *key* matches no choice or is ambiguous.
        """
        specs = self.choice_specs()
        columns = self.choice_columns
        for column, (step_name, spec) in zip(columns, specs):
            if key == column or key == f"{step_name}.{spec.name}":
                return step_name, spec
        matches = [(s, spec) for s, spec in specs if spec.name == key]
        if len(matches) > 1:
            raise KeyError(f"Choice name '{key}' is ambiguous; use one of: {', '.join(f'{s}.{key}' for s, _ in matches)}")
        raise KeyError(f"Design has no choice named '{key}'")

    def protocol_record(self, protocol: Protocol) -> Dict[str, Any]:
        """Flatten a bound protocol into ``{column: value}``."""
        return dict(zip(self.choice_columns, protocol.values()))

    # =========================================================================
    # Protocol binding
    # =========================================================================

    def bind(self, protocol: Any) -> Protocol:
        """Coerce *protocol* into a validated ``Protocol`` for this design.

        Accepted forms:

        - a ``Protocol`` or a list of ``Choice`` objects carrying step names
          (matched by step name);
        - a nested mapping ``{step_name: {choice_name: value}}``;
        - a flat mapping ``{column_or_choice_name: value}``;
        - a positional list of raw values, one per declared choice, in
          protocol order.

        Raises:
            InvalidChoiceError: On any missing, extra, mistyped or
                out-of-domain choice. The error carries the step name and
                its position in the design.
        """
        per_step = self._split(protocol)

        choices: List[Choice] = []
        for position, s in enumerate(self._steps):
            try:
                choices.extend(validate_choices(per_step.get(s.name), tuple(s.describe().choice_spec_list), step=s.name))
            except InvalidChoiceError as exc:
                exc.position = position
                raise
        return Protocol(choices)

    def _split(self, protocol: Any) -> Dict[str, Any]:
        """Group the raw protocol by step name."""
        names = set(self.step_names)

        if protocol is None:
            return {}

        if isinstance(protocol, Protocol) or (
            isinstance(protocol, (list, tuple)) and protocol and all(isinstance(c, Choice) and c.step for c in protocol)
        ):
            grouped: Dict[str, List[Choice]] = {}
            for c in protocol:
                if c.step not in names:
                    raise InvalidChoiceError(
                        f"choice '{c.name}' belongs to step '{c.step}', which is not part of this design",
                        step=c.step,
                        field=c.name,
                        reason=UNEXPECTED,
                    )
                grouped.setdefault(c.step, []).append(c)
            return grouped

        if isinstance(protocol, Mapping):
            if protocol and all(k in names and isinstance(v, Mapping) for k, v in protocol.items()):
                return {k: dict(v) for k, v in protocol.items()}
            grouped_values: Dict[str, Dict[str, Any]] = {}
            for key, value in protocol.items():
                try:
                    step_name, spec = self.resolve_choice(key)
                except KeyError as exc:
                    raise InvalidChoiceError(exc.args[0], field=key, reason=UNEXPECTED) from None
                grouped_values.setdefault(step_name, {})[spec.name] = value
            return grouped_values

        if isinstance(protocol, (list, tuple)):
            specs = self.choice_specs()
            if len(protocol) != len(specs):
                reason = MISSING if len(protocol) < len(specs) else UNEXPECTED
                raise InvalidChoiceError(
                    f"protocol has {len(protocol)} value(s) but the design declares {len(specs)} choice(s)",
                    reason=reason,
                )
            grouped_list: Dict[str, List[Any]] = {}
            for (step_name, _), value in zip(specs, protocol):
                grouped_list.setdefault(step_name, []).append(value)
            return grouped_list

        raise InvalidChoiceError(f"Cannot interpret a {type(protocol).__name__} as a protocol", reason=UNEXPECTED)
