"""
Validation utilities for RDFAnalysis.

This module provides the choice validator used by every step, plus the
parameter checks behind the analysis configuration methods.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, List, Optional, Sequence, Tuple

from ..core.choices import BOOLEAN, CATEGORICAL, NUMERIC, Choice, ChoiceSpec, _matches_kind
from ..core.errors import InvalidChoiceError

__all__ = ["validate_choice", "validate_choices"]

# Violation reasons reported on InvalidChoiceError.reason
MISSING = "missing"
WRONG_KIND = "wrong_kind"
OUT_OF_DOMAIN = "out_of_domain"
UNEXPECTED = "unexpected"


@dataclass
class _ValidationResult:
    """Problems found by one configuration check.

    A result with no ``errors`` is valid; ``warnings`` never invalidate it
    and are surfaced by the caller with ``warnings.warn``.
    """

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_if_invalid(self):
        """Raise ``ValueError`` listing every error, if there are any."""
        if self.errors:
            raise ValueError("Invalid configuration:\n" + "\n".join(f"  - {err}" for err in self.errors))


def _number_error(
    value: Any,
    name: str,
    integer: bool = False,
    low: Optional[float] = None,
    high: Optional[float] = None,
) -> Optional[str]:
    """Describe why *value* is not an acceptable number, or return ``None``."""
    kind = "an integer" if integer else "a number"
    if isinstance(value, bool) or not isinstance(value, int if integer else Real):
        return f"{name} must be {kind}, got {type(value).__name__} {value!r}"
    if (low is not None and value < low) or (high is not None and value > high):
        bounds = f"between {low} and {high}" if low is not None and high is not None else (f">= {low}" if low is not None else f"<= {high}")
        return f"{name} must be {bounds}, got {value}"
    return None


# =========================================================================
# Choice validation
# =========================================================================


def _choice_violation(value: Any, spec: ChoiceSpec) -> Optional[Tuple[str, str, Any]]:
    """Find what is wrong with *value* for *spec*.

    Returns:
        ``(reason, message, member)``. ``reason`` is ``None`` when the value
        is valid, in which case ``member`` is the matching domain value.
    """
    if isinstance(value, Choice):
        if value.name != spec.name:
            return UNEXPECTED, f"choice '{value.name}' supplied where '{spec.name}' was expected", None
        if value.kind != spec.kind:
            return WRONG_KIND, f"'{spec.name}' is {spec.kind}, got a {value.kind} choice", None
        value = value.value

    if not _matches_kind(value, spec.kind):
        expected = {CATEGORICAL: "a string", NUMERIC: "a number", BOOLEAN: "True or False"}[spec.kind]
        return WRONG_KIND, f"'{spec.name}' is {spec.kind} and needs {expected}, got {type(value).__name__} {value!r}", None

    domain = spec.domain if isinstance(spec.domain, tuple) else ()
    for member in domain:
        if _matches_kind(member, spec.kind) and member == value:
            return None, "", member

    allowed = ", ".join(repr(d) for d in domain)
    return OUT_OF_DOMAIN, f"{value!r} is not a valid value for '{spec.name}' (allowed: {allowed})", None


def _check_choice(value: Any, spec: ChoiceSpec) -> _ValidationResult:
    """Non-raising choice check in the ``_ValidationResult`` form."""
    reason, message, _ = _choice_violation(value, spec)
    if reason is None:
        return _ValidationResult()
    return _ValidationResult([message])


def validate_choice(value: Any, spec: ChoiceSpec, step: Optional[str] = None) -> Choice:
    """Validate one value against its spec.

    Args:
        value: Raw value or a ``Choice``.
        spec: The declared ``ChoiceSpec``.
        step: Owning step name, recorded on the returned choice and on errors.

    Returns:
        A ``Choice`` carrying the matching domain member.

    Raises:
        InvalidChoiceError: If the value has the wrong kind or lies outside
            the domain.
    """
    reason, message, member = _choice_violation(value, spec)
    if reason is not None:
        raise InvalidChoiceError(message, step=step, field=spec.name, reason=reason)
    return Choice(spec.name, member, spec.kind, step)


def validate_choices(
    values: Any,
    specs: Sequence[ChoiceSpec],
    step: Optional[str] = None,
) -> Tuple[Choice, ...]:
    """Validate a full set of choices for one step, in declared order.

    *values* may be a mapping ``{name: value}``, a sequence of ``Choice``
    objects (matched by name), a positional sequence of raw values, or
    ``None`` for steps without choices. The first violation aborts.

    Raises:
        InvalidChoiceError: On the first missing, mistyped, out-of-domain or
            unexpected choice.
    """
    if values is None:
        values = {}

    if isinstance(values, Choice):
        values = [values]

    if isinstance(values, Mapping):
        by_name = dict(values)
    elif isinstance(values, (list, tuple)) and values and all(isinstance(v, Choice) for v in values):
        by_name = {}
        for c in values:
            if c.name in by_name:
                raise InvalidChoiceError(f"choice '{c.name}' given more than once", step=step, field=c.name, reason=UNEXPECTED)
            by_name[c.name] = c
    elif isinstance(values, (list, tuple)):
        if len(values) > len(specs):
            raise InvalidChoiceError(
                f"expected {len(specs)} choice(s), got {len(values)}",
                step=step,
                field=f"#{len(specs)}",
                reason=UNEXPECTED,
            )
        by_name = {spec.name: v for spec, v in zip(specs, values)}
    else:
        raise InvalidChoiceError(
            f"choices must be a mapping or a sequence, got {type(values).__name__}",
            step=step,
            reason=WRONG_KIND,
        )

    validated = []
    for spec in specs:
        if spec.name not in by_name:
            raise InvalidChoiceError(f"no value given for '{spec.name}'", step=step, field=spec.name, reason=MISSING)
        validated.append(validate_choice(by_name[spec.name], spec, step=step))

    declared = {spec.name for spec in specs}
    extra = [name for name in by_name if name not in declared]
    if extra:
        raise InvalidChoiceError(f"unknown choice '{extra[0]}'", step=step, field=extra[0], reason=UNEXPECTED)

    return tuple(validated)


# =========================================================================
# Parameter validation
# =========================================================================


def _validate_alpha(alpha: Any) -> _ValidationResult:
    """Significance level: a number in [0, 0.25]."""
    error = _number_error(alpha, "alpha", low=0, high=0.25)
    return _ValidationResult([error] if error else [])


def _validate_replications(replications: Any) -> _ValidationResult:
    """Number of power-simulation replications per parameter set."""
    error = _number_error(replications, "replications", integer=True, low=1)
    if error:
        return _ValidationResult([error])
    result = _ValidationResult()
    if replications < 100:
        result.warnings.append(f"Low replication count ({replications}); power estimates will be noisy below 100 replications.")
    return result


def _validate_seed(seed: Any) -> _ValidationResult:
    """Master seed: ``None`` or an integer in [0, 3e9]."""
    if seed is None:
        return _ValidationResult()
    error = _number_error(seed, "seed", integer=True, low=0, high=3_000_000_000)
    return _ValidationResult([error] if error else [])


def _validate_parallel_settings(enable: Any, n_cores: Optional[int]) -> Tuple[Tuple[bool, int], _ValidationResult]:
    """Check the parallel switch and worker count.

    ``n_cores=None`` picks half the machine's cores; larger requests are
    capped at the core count.

    Returns:
        ``((enable, n_cores), result)``.
    """
    from joblib import cpu_count

    if not isinstance(enable, bool):
        return (False, 1), _ValidationResult([f"enable must be True or False, got {enable!r}"])

    available = cpu_count()
    if n_cores is None:
        return (enable, max(1, available // 2)), _ValidationResult()

    error = _number_error(n_cores, "n_cores", integer=True, low=1)
    if error:
        return (enable, 1), _ValidationResult([error])
    return (enable, min(n_cores, available)), _ValidationResult()


def _validate_parameter_grid(parameter_grid: Any) -> _ValidationResult:
    """Validate a power-simulation parameter grid.

    Accepts a mapping of parameter name to a finite list of values, or a
    non-empty list of parameter mappings.
    """
    result = _ValidationResult()

    if isinstance(parameter_grid, Mapping):
        for name, values in parameter_grid.items():
            if not isinstance(name, str):
                result.errors.append(f"Parameter names must be strings, got {name!r}")
            elif isinstance(values, (list, tuple, range)) and len(values) == 0:
                result.errors.append(f"Parameter '{name}' has no values")
            elif not isinstance(values, (list, tuple, range, str, int, float, bool)) and not hasattr(values, "tolist"):
                result.errors.append(f"Parameter '{name}' must be a value or a finite list of values, got {type(values).__name__}")
    elif isinstance(parameter_grid, (list, tuple)):
        if len(parameter_grid) == 0:
            result.errors.append("Parameter grid is empty")
        for i, combo in enumerate(parameter_grid):
            if not isinstance(combo, Mapping):
                result.errors.append(f"Parameter combination {i} must be a mapping, got {type(combo).__name__}")
    else:
        result.errors.append(f"parameter_grid must be a mapping or a list of mappings, got {type(parameter_grid).__name__}")

    return result
