"""
Step contract for RDFAnalysis designs.

A step is a stateless transformation ``(input, choices) -> output`` with a
declared list of researcher degrees of freedom. It offers two operations:

- ``describe()`` returns documentation and the choice schema without
  touching any data.
- ``execute(input, choices)`` validates the choices, then applies the
  transformation.

Steps are either subclasses of ``Step`` implementing ``transform`` or plain
functions wrapped with ``FunctionStep`` / the ``@step`` decorator.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

from ..utils.validators import validate_choices
from .choices import Choice, ChoiceSpec
from .errors import StepRuntimeError


def _as_lines(text: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    """Normalise a docstring-like text or list of lines into a tuple of lines."""
    if text is None:
        return ()
    if isinstance(text, str):
        cleaned = inspect.cleandoc(text)
        return tuple(cleaned.splitlines()) if cleaned else ()
    return tuple(str(line) for line in text)


@dataclass(frozen=True)
class StepMetadata:
    """Schema and documentation surface of a step.

    Attributes:
        name: Step name.
        step_description: Ordered text lines describing the step.
        choice_description: Ordered text lines describing its choices.
        choice_spec_list: Ordered ``ChoiceSpec`` declarations.
    """

    name: str
    step_description: Tuple[str, ...]
    choice_description: Tuple[str, ...]
    choice_spec_list: Tuple[ChoiceSpec, ...]

    def as_dict(self) -> Dict[str, Any]:
        """Plain-data view consumed by documentation and flow-chart tooling."""
        return {
            "name": self.name,
            "step_description": list(self.step_description),
            "choice_description": list(self.choice_description),
            "choice_spec_list": [spec.as_dict() for spec in self.choice_spec_list],
        }


@dataclass
class StepResult:
    """Output of ``Step.execute``.

    Attributes:
        data: Transformed payload handed to the next step.
        protocol_fragment: The validated choices that produced ``data``.
    """

    data: Any
    protocol_fragment: Tuple[Choice, ...]


@dataclass
class StepTestCase:
    """An embedded unit test shipped with a step.

    Attributes:
        name: Test name, unique within the step.
        choices: Choices to execute the step with.
        check: Called with the step output; fails by raising
            ``AssertionError`` or returning ``False``. Ignored when
            *raises* is set.
        input: Input to run on. ``None`` uses ``Step.test_input()``.
        raises: Expected exception type (e.g. ``StepRuntimeError``).
    """

    name: str
    choices: Any = None
    check: Optional[Callable[[Any], Any]] = None
    input: Any = None
    raises: Optional[Type[BaseException]] = None


class Step(ABC):
    """Base class for pipeline steps.

    Subclasses set ``name``, ``description``, ``choice_specs`` (and
    optionally ``choice_description``) and implement ``transform``. The
    transformation must be a pure function of its arguments: designs are
    enumerated and executed in parallel on the assumption that the same
    input and choices always give the same output.
    """

    name: str = ""
    description: Union[str, Sequence[str]] = ""
    choice_description: Union[str, Sequence[str], None] = None
    choice_specs: Sequence[ChoiceSpec] = ()

    def describe(self) -> StepMetadata:
        """Return the step's documentation and choice schema."""
        specs = tuple(self.choice_specs)
        if self.choice_description is None:
            choice_lines = tuple(f"{spec.name}: {spec.description}" if spec.description else spec.name for spec in specs)
        else:
            choice_lines = _as_lines(self.choice_description)
        return StepMetadata(
            name=self.name,
            step_description=_as_lines(self.description),
            choice_description=choice_lines,
            choice_spec_list=specs,
        )

    def execute(self, data: Any, choices: Any = None) -> StepResult:
        """Validate *choices* and apply the transformation to *data*.

        Raises:
            InvalidChoiceError: If any choice violates its spec.
            StepRuntimeError: If the transformation itself raises.
        """
        validated = validate_choices(choices, tuple(self.choice_specs), step=self.name)
        kwargs = {c.name: c.value for c in validated}
        try:
            output = self.transform(data, **kwargs)
        except Exception as exc:
            raise StepRuntimeError(self.name, exc) from exc
        return StepResult(output, validated)

    @abstractmethod
    def transform(self, data: Any, **choices: Any) -> Any:
        """Compute the step output from *data* and the validated choice values."""
        ...

    def test_input(self) -> Any:
        """Deterministic input fixture for the embedded tests."""
        return None

    def test_cases(self) -> List[StepTestCase]:
        """Embedded unit tests run by ``run_step_tests``."""
        return []

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}')"


class FunctionStep(Step):
    """A step backed by a plain function ``func(data, **choices)``."""

    def __init__(
        self,
        name: str,
        func: Callable[..., Any],
        choices: Sequence[ChoiceSpec] = (),
        description: Union[str, Sequence[str], None] = None,
        choice_description: Union[str, Sequence[str], None] = None,
        tests: Sequence[StepTestCase] = (),
        test_input: Any = None,
    ):
        if not isinstance(name, str) or not name:
            raise ValueError(f"Step name must be a non-empty string, got {name!r}")
        if not callable(func):
            raise TypeError(f"func must be callable, got {type(func).__name__}")
        self.name = name
        self.func = func
        self.choice_specs = tuple(choices)
        self.description = description if description is not None else (inspect.getdoc(func) or "")
        self.choice_description = choice_description
        self._tests = list(tests)
        self._test_input = test_input

    def transform(self, data, **choices):
        return self.func(data, **choices)

    def test_input(self):
        return self._test_input

    def test_cases(self):
        return list(self._tests)


def step(
    name: Optional[str] = None,
    choices: Sequence[ChoiceSpec] = (),
    description: Union[str, Sequence[str], None] = None,
    choice_description: Union[str, Sequence[str], None] = None,
    tests: Sequence[StepTestCase] = (),
    test_input: Any = None,
) -> Callable[[Callable[..., Any]], FunctionStep]:
    """Decorator turning a function into a ``FunctionStep``.

    Example:
        >>> @step(choices=[categorical("drop_na", ["yes", "no"])])
        ... def clean(df, drop_na):
        ...     return df.dropna() if drop_na == "yes" else df
    """

    def wrap(func: Callable[..., Any]) -> FunctionStep:
        return FunctionStep(
            name=name or func.__name__,
            func=func,
            choices=choices,
            description=description,
            choice_description=choice_description,
            tests=tests,
            test_input=test_input,
        )

    return wrap
