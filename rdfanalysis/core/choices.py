"""
Choice schema and choice values for researcher degrees of freedom.

A ``ChoiceSpec`` declares one decision point of a step together with the
finite set of values it may take. A ``Choice`` is a concrete value bound to
one spec, and a ``Protocol`` is the ordered collection of choices that fully
specifies one analysis path through a design.
"""

import numbers
from collections.abc import Iterator, Set
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .errors import DesignSpaceError

CATEGORICAL = "categorical"
NUMERIC = "numeric"
BOOLEAN = "boolean"

CHOICE_KINDS = (CATEGORICAL, NUMERIC, BOOLEAN)


def _is_real_number(value: Any) -> bool:
    """Numbers that may populate a numeric domain (``bool`` excluded)."""
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def _matches_kind(value: Any, kind: str) -> bool:
    """Return True if *value* has the Python type expected for *kind*."""
    if kind == CATEGORICAL:
        return isinstance(value, str)
    if kind == BOOLEAN:
        return isinstance(value, (bool, np.bool_))
    if kind == NUMERIC:
        return _is_real_number(value)
    return False


def _normalize_domain(domain: Any, kind: str) -> Any:
    """Turn list-like domains into a tuple; leave anything else untouched.

    Sets are sorted so that enumeration order never depends on hashing.
    Values that cannot be enumerated safely (iterators, strings, scalars)
    are kept as-is and rejected later by ``ChoiceSpec.check_domain``.
    """
    if domain is None and kind == BOOLEAN:
        return (True, False)
    if isinstance(domain, np.ndarray):
        return tuple(domain.tolist()) if domain.ndim == 1 else domain
    if isinstance(domain, (Set, frozenset)):
        try:
            return tuple(sorted(domain))
        except TypeError:
            return tuple(sorted(domain, key=repr))
    if isinstance(domain, (list, tuple, range)):
        return tuple(domain)
    return domain


@dataclass(frozen=True)
class ChoiceSpec:
    """Declaration of one researcher degree of freedom.

    Attributes:
        name: Choice name, unique within its step.
        kind: ``"categorical"``, ``"numeric"`` or ``"boolean"``.
        domain: Explicit finite set of admissible values, in enumeration
            order. Boolean specs default to ``(True, False)``.
        description: Human-readable explanation used in documentation.
    """

    name: str
    kind: str = CATEGORICAL
    domain: Any = None
    description: str = ""

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Choice name must be a non-empty string, got {self.name!r}")
        if self.kind not in CHOICE_KINDS:
            raise ValueError(f"Unknown choice kind {self.kind!r} for '{self.name}'. Choose from: {', '.join(CHOICE_KINDS)}")
        object.__setattr__(self, "domain", _normalize_domain(self.domain, self.kind))

    def check_domain(self, step: Optional[str] = None) -> Tuple[Any, ...]:
        """Return the domain as a tuple or raise ``DesignSpaceError``.

        A domain is enumerable when it is an explicit, non-empty, duplicate
        free collection whose values all match the declared kind.
        """
        where = f"'{step}.{self.name}'" if step else f"'{self.name}'"
        domain = self.domain

        if not isinstance(domain, tuple):
            raise DesignSpaceError(
                f"Choice {where} has a non-enumerable domain ({type(domain).__name__}); provide an explicit finite list of values"
            )
        if len(domain) == 0:
            raise DesignSpaceError(f"Choice {where} has an empty domain")

        bad = [v for v in domain if not _matches_kind(v, self.kind)]
        if bad:
            raise DesignSpaceError(f"Choice {where} is {self.kind} but its domain contains {bad[0]!r}")

        if self.kind == NUMERIC and any(not np.isfinite(v) for v in domain):
            raise DesignSpaceError(f"Choice {where} has non-finite numeric values in its domain")

        if len(set(domain)) != len(domain):
            raise DesignSpaceError(f"Choice {where} has duplicate values in its domain")

        return domain

    def as_dict(self) -> Dict[str, Any]:
        """Plain ``{name, kind, domain}`` view for documentation tooling."""
        return {
            "name": self.name,
            "kind": self.kind,
            "domain": list(self.domain) if isinstance(self.domain, tuple) else self.domain,
            "description": self.description,
        }


def categorical(name: str, domain: Sequence[str], description: str = "") -> ChoiceSpec:
    """Shorthand for a categorical ``ChoiceSpec``."""
    return ChoiceSpec(name, CATEGORICAL, domain, description)


def numeric(name: str, domain: Sequence[float], description: str = "") -> ChoiceSpec:
    """Shorthand for a numeric ``ChoiceSpec`` with an enumerated domain."""
    return ChoiceSpec(name, NUMERIC, domain, description)


def boolean(name: str, description: str = "", domain: Sequence[bool] = (True, False)) -> ChoiceSpec:
    """Shorthand for a boolean ``ChoiceSpec``."""
    return ChoiceSpec(name, BOOLEAN, domain, description)


@dataclass(frozen=True)
class Choice:
    """A concrete value for one ``ChoiceSpec``.

    Attributes:
        name: Name of the spec this value is bound to.
        value: The chosen value.
        kind: Kind tag; must equal the spec's kind.
        step: Name of the owning step (set once bound to a design).
    """

    name: str
    value: Any
    kind: str
    step: Optional[str] = None

    @classmethod
    def categorical(cls, name: str, value: str, step: Optional[str] = None) -> "Choice":
        return cls(name, value, CATEGORICAL, step)

    @classmethod
    def numeric(cls, name: str, value: float, step: Optional[str] = None) -> "Choice":
        return cls(name, value, NUMERIC, step)

    @classmethod
    def boolean(cls, name: str, value: bool, step: Optional[str] = None) -> "Choice":
        return cls(name, value, BOOLEAN, step)

    @property
    def key(self) -> str:
        """``step.name`` when bound to a step, else just ``name``."""
        return f"{self.step}.{self.name}" if self.step else self.name


class Protocol(Sequence):
    """Ordered, immutable list of choices spanning every step of a design.

    Choices are looked up by step name (``for_step``) rather than by bare
    position, so a protocol stays aligned with its design even when the
    same number of choices happens to fit a different step layout.
    """

    __slots__ = ("_choices",)

    def __init__(self, choices=()):
        choices = tuple(choices)
        for c in choices:
            if not isinstance(c, Choice):
                raise TypeError(f"Protocol items must be Choice instances, got {type(c).__name__}")
        self._choices = choices

    def __len__(self) -> int:
        return len(self._choices)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Protocol(self._choices[index])
        return self._choices[index]

    def __iter__(self) -> Iterator[Choice]:
        return iter(self._choices)

    def __eq__(self, other):
        if isinstance(other, Protocol):
            return self._choices == other._choices
        if isinstance(other, (list, tuple)):
            return list(self._choices) == list(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._choices)

    def __repr__(self):
        inner = ", ".join(f"{c.key}={c.value!r}" for c in self._choices)
        return f"Protocol({inner})"

    @property
    def step_names(self) -> List[str]:
        """Step names in the order they first appear."""
        return list(dict.fromkeys(c.step for c in self._choices))

    def for_step(self, step: str) -> Tuple[Choice, ...]:
        """Choices belonging to *step*, in declared order."""
        return tuple(c for c in self._choices if c.step == step)

    def values(self) -> List[Any]:
        """Raw choice values in protocol order."""
        return [c.value for c in self._choices]

    def as_dict(self) -> Dict[str, Any]:
        """Mapping of ``step.name`` keys to values."""
        return {c.key: c.value for c in self._choices}

    def nested(self) -> Dict[str, Dict[str, Any]]:
        """Mapping ``{step: {choice: value}}``."""
        out: Dict[str, Dict[str, Any]] = {}
        for c in self._choices:
            out.setdefault(c.step, {})[c.name] = c.value
        return out
