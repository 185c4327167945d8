"""
Tests for validation utilities.
"""

import pytest

from rdfanalysis.core.choices import Choice, boolean, categorical, numeric
from rdfanalysis.core.errors import InvalidChoiceError

YES_NO = categorical("control", ["yes", "no"])


class TestValidateChoice:
    """Test validate_choice against single specs."""

    def test_valid_categorical(self):
        from rdfanalysis.utils.validators import validate_choice

        choice = validate_choice("yes", YES_NO, step="model")
        assert choice == Choice("control", "yes", "categorical", "model")

    def test_out_of_domain(self):
        from rdfanalysis.utils.validators import validate_choice

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choice("maybe", YES_NO, step="model")
        err = exc_info.value
        assert err.reason == "out_of_domain"
        assert err.field == "control"
        assert err.step == "model"
        assert "'maybe'" in str(err)

    def test_wrong_kind_for_categorical(self):
        from rdfanalysis.utils.validators import validate_choice

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choice(1, YES_NO)
        assert exc_info.value.reason == "wrong_kind"

    def test_numeric_accepts_equal_int(self):
        from rdfanalysis.utils.validators import validate_choice

        choice = validate_choice(1, numeric("k", [1.0, 2.0]))
        assert choice.value == 1.0
        assert isinstance(choice.value, float)

    def test_numeric_rejects_bool(self):
        from rdfanalysis.utils.validators import validate_choice

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choice(True, numeric("k", [1, 2]))
        assert exc_info.value.reason == "wrong_kind"

    def test_numeric_rejects_string(self):
        from rdfanalysis.utils.validators import validate_choice

        with pytest.raises(InvalidChoiceError):
            validate_choice("1", numeric("k", [1, 2]))

    def test_boolean_requires_bool(self):
        from rdfanalysis.utils.validators import validate_choice

        spec = boolean("log")
        assert validate_choice(False, spec).value is False
        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choice(0, spec)
        assert exc_info.value.reason == "wrong_kind"

    def test_choice_object_kind_mismatch(self):
        from rdfanalysis.utils.validators import validate_choice

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choice(Choice.numeric("control", 1), YES_NO)
        assert exc_info.value.reason == "wrong_kind"

    def test_choice_object_valid(self):
        from rdfanalysis.utils.validators import validate_choice

        assert validate_choice(Choice.categorical("control", "no"), YES_NO).value == "no"

    def test_check_choice_result(self):
        from rdfanalysis.utils.validators import _check_choice

        assert _check_choice("yes", YES_NO).is_valid
        result = _check_choice("maybe", YES_NO)
        assert not result.is_valid
        with pytest.raises(ValueError, match="maybe"):
            result.raise_if_invalid()


class TestValidateChoices:
    """Test validation of a step's full choice set."""

    SPECS = (categorical("method", ["a", "b"]), numeric("cut", [0.1, 0.2]))

    def test_mapping(self):
        from rdfanalysis.utils.validators import validate_choices

        out = validate_choices({"method": "a", "cut": 0.2}, self.SPECS, step="s")
        assert [c.value for c in out] == ["a", 0.2]
        assert all(c.step == "s" for c in out)

    def test_positional(self):
        from rdfanalysis.utils.validators import validate_choices

        out = validate_choices(["b", 0.1], self.SPECS)
        assert [c.value for c in out] == ["b", 0.1]

    def test_choice_list_matched_by_name(self):
        from rdfanalysis.utils.validators import validate_choices

        out = validate_choices([Choice.numeric("cut", 0.1), Choice.categorical("method", "b")], self.SPECS)
        assert [c.name for c in out] == ["method", "cut"]

    def test_missing(self):
        from rdfanalysis.utils.validators import validate_choices

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choices({"method": "a"}, self.SPECS)
        assert exc_info.value.reason == "missing"
        assert exc_info.value.field == "cut"

    def test_unexpected(self):
        from rdfanalysis.utils.validators import validate_choices

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choices({"method": "a", "cut": 0.1, "extra": 1}, self.SPECS)
        assert exc_info.value.reason == "unexpected"
        assert exc_info.value.field == "extra"

    def test_too_many_positional(self):
        from rdfanalysis.utils.validators import validate_choices

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choices(["a", 0.1, 3], self.SPECS)
        assert exc_info.value.reason == "unexpected"

    def test_first_violation_wins(self):
        from rdfanalysis.utils.validators import validate_choices

        with pytest.raises(InvalidChoiceError) as exc_info:
            validate_choices({"method": "z", "cut": 9.9}, self.SPECS)
        assert exc_info.value.field == "method"

    def test_none_for_no_specs(self):
        from rdfanalysis.utils.validators import validate_choices

        assert validate_choices(None, ()) == ()

    def test_bad_container(self):
        from rdfanalysis.utils.validators import validate_choices

        with pytest.raises(InvalidChoiceError):
            validate_choices(42, self.SPECS)


class TestParameterValidators:
    """Test configuration parameter validators."""

    def test_alpha(self):
        from rdfanalysis.utils.validators import _validate_alpha

        assert _validate_alpha(0.05).is_valid
        assert not _validate_alpha(0.5).is_valid
        assert not _validate_alpha("0.05").is_valid

    def test_replications(self):
        from rdfanalysis.utils.validators import _validate_replications

        assert _validate_replications(200).is_valid
        assert not _validate_replications(0).is_valid
        assert not _validate_replications(10.0).is_valid
        assert not _validate_replications(True).is_valid

    def test_low_replications_warns(self):
        from rdfanalysis.utils.validators import _validate_replications

        result = _validate_replications(20)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_seed(self):
        from rdfanalysis.utils.validators import _validate_seed

        assert _validate_seed(None).is_valid
        assert _validate_seed(42).is_valid
        assert not _validate_seed(-1).is_valid
        assert not _validate_seed(4_000_000_000).is_valid
        assert not _validate_seed(1.5).is_valid

    def test_parallel_settings(self):
        from rdfanalysis.utils.validators import _validate_parallel_settings

        (enable, n_cores), result = _validate_parallel_settings(True, 1)
        assert result.is_valid
        assert enable is True
        assert n_cores == 1

        _, result = _validate_parallel_settings("yes", None)
        assert not result.is_valid

        _, result = _validate_parallel_settings(True, 0)
        assert not result.is_valid

    def test_parameter_grid(self):
        from rdfanalysis.utils.validators import _validate_parameter_grid

        assert _validate_parameter_grid({"n": [10, 20]}).is_valid
        assert _validate_parameter_grid([{"n": 10}]).is_valid
        assert not _validate_parameter_grid({"n": []}).is_valid
        assert not _validate_parameter_grid([]).is_valid
        assert not _validate_parameter_grid([10]).is_valid
        assert not _validate_parameter_grid("n=10").is_valid
