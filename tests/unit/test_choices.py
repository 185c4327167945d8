"""
Tests for choice specs, choice values and protocols.
"""

import numpy as np
import pytest

from rdfanalysis.core.choices import (
    BOOLEAN,
    CATEGORICAL,
    NUMERIC,
    Choice,
    ChoiceSpec,
    Protocol,
    boolean,
    categorical,
    numeric,
)
from rdfanalysis.core.errors import DesignSpaceError


class TestChoiceSpec:
    """Test ChoiceSpec construction and domain checks."""

    def test_list_domain_becomes_tuple(self):
        spec = categorical("method", ["a", "b"])
        assert spec.domain == ("a", "b")
        assert spec.kind == CATEGORICAL

    def test_boolean_default_domain(self):
        spec = ChoiceSpec("flag", BOOLEAN)
        assert spec.domain == (True, False)
        assert boolean("flag").domain == (True, False)

    def test_set_domain_is_sorted(self):
        spec = numeric("cut", {0.05, 0.01, 0.025})
        assert spec.domain == (0.01, 0.025, 0.05)

    def test_array_domain(self):
        spec = numeric("cut", np.array([1.0, 2.0]))
        assert spec.domain == (1.0, 2.0)
        assert spec.check_domain() == (1.0, 2.0)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown choice kind"):
            ChoiceSpec("x", "continuous", [1])

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ChoiceSpec("", CATEGORICAL, ["a"])

    def test_empty_domain(self):
        with pytest.raises(DesignSpaceError, match="empty domain"):
            categorical("method", []).check_domain()

    def test_generator_domain_is_not_enumerable(self):
        spec = numeric("cut", (x / 10 for x in range(3)))
        with pytest.raises(DesignSpaceError, match="non-enumerable"):
            spec.check_domain(step="trim")

    def test_string_domain_is_not_enumerable(self):
        with pytest.raises(DesignSpaceError):
            categorical("method", "abc").check_domain()

    def test_missing_domain_is_not_enumerable(self):
        with pytest.raises(DesignSpaceError):
            ChoiceSpec("method").check_domain()

    def test_wrong_kind_in_domain(self):
        with pytest.raises(DesignSpaceError, match="contains"):
            numeric("cut", [0.1, "high"]).check_domain()

    def test_bool_not_numeric(self):
        with pytest.raises(DesignSpaceError):
            numeric("cut", [True, 0.5]).check_domain()

    def test_non_finite_numeric(self):
        with pytest.raises(DesignSpaceError, match="non-finite"):
            numeric("cut", [0.1, float("inf")]).check_domain()

    def test_duplicates(self):
        with pytest.raises(DesignSpaceError, match="duplicate"):
            categorical("method", ["a", "a"]).check_domain()

    def test_error_names_step(self):
        with pytest.raises(DesignSpaceError, match="'clean.method'"):
            categorical("method", []).check_domain(step="clean")

    def test_as_dict(self):
        spec = categorical("method", ["a", "b"], "How to do it")
        assert spec.as_dict() == {
            "name": "method",
            "kind": "categorical",
            "domain": ["a", "b"],
            "description": "How to do it",
        }


class TestChoice:
    """Test tagged choice values."""

    def test_constructors_tag_kind(self):
        assert Choice.categorical("m", "a").kind == CATEGORICAL
        assert Choice.numeric("k", 1.5).kind == NUMERIC
        assert Choice.boolean("f", True).kind == BOOLEAN

    def test_key(self):
        assert Choice.categorical("m", "a").key == "m"
        assert Choice.categorical("m", "a", step="clean").key == "clean.m"

    def test_frozen(self):
        c = Choice.numeric("k", 1)
        with pytest.raises(AttributeError):
            c.value = 2


class TestProtocol:
    """Test the ordered protocol container."""

    @pytest.fixture
    def protocol(self):
        return Protocol(
            [
                Choice.numeric("k", 1, step="add"),
                Choice.categorical("factor", "ten", step="scale"),
                Choice.boolean("log", False, step="scale"),
            ]
        )

    def test_sequence_behaviour(self, protocol):
        assert len(protocol) == 3
        assert protocol[0].name == "k"
        assert isinstance(protocol[1:], Protocol)

    def test_for_step(self, protocol):
        assert [c.name for c in protocol.for_step("scale")] == ["factor", "log"]
        assert protocol.for_step("missing") == ()

    def test_step_names(self, protocol):
        assert protocol.step_names == ["add", "scale"]

    def test_values_and_dicts(self, protocol):
        assert protocol.values() == [1, "ten", False]
        assert protocol.as_dict() == {"add.k": 1, "scale.factor": "ten", "scale.log": False}
        assert protocol.nested() == {"add": {"k": 1}, "scale": {"factor": "ten", "log": False}}

    def test_equality(self, protocol):
        assert protocol == Protocol(list(protocol))
        assert protocol == list(protocol)
        assert Protocol() == []
        assert hash(protocol) == hash(Protocol(list(protocol)))

    def test_rejects_non_choices(self):
        with pytest.raises(TypeError):
            Protocol(["yes"])
