"""Unit tests for FormOptions."""

import pytest

from formstate.config import FormOptions
from formstate.errors import FormConfigError
from formstate.types import CriteriaMode, ValidationMode


class TestDefaults:
    """Test default option values."""

    def test_defaults(self):
        """Should use the documented defaults when no options are given."""
        opts = FormOptions()
        assert opts.mode == ValidationMode.ON_SUBMIT
        assert opts.re_validate_mode == ValidationMode.ON_CHANGE
        assert opts.criteria_mode == CriteriaMode.FIRST_ERROR
        assert opts.default_values == {}
        assert opts.focus_on_error() is True
        assert opts.display_all_errors is False

    def test_empty_dict_matches_defaults(self):
        """Should treat an empty dict the same as no options."""
        assert FormOptions.from_dict({}) == FormOptions()
        assert FormOptions.from_dict(None) == FormOptions()


class TestFromDict:
    """Test parsing camelCase options."""

    def test_all_options(self):
        """Should read every camelCase option."""
        opts = FormOptions.from_dict({
            "mode": "onBlur",
            "reValidateMode": "onSubmit",
            "criteriaMode": "all",
            "defaultValues": {"name": "Ada"},
            "shouldFocusError": False,
        })
        assert opts.mode == ValidationMode.ON_BLUR
        assert opts.re_validate_mode == ValidationMode.ON_SUBMIT
        assert opts.display_all_errors is True
        assert opts.get_default("name") == "Ada"
        assert opts.focus_on_error() is False

    def test_enum_values_accepted(self):
        """Should accept enum members as option values."""
        opts = FormOptions.from_dict({"mode": ValidationMode.ON_CHANGE})
        assert opts.mode == ValidationMode.ON_CHANGE

    def test_invalid_mode_raises(self):
        """Should raise FormConfigError for an unknown mode."""
        with pytest.raises(FormConfigError):
            FormOptions.from_dict({"mode": "sometimes"})

    def test_focus_setting_must_be_bool_or_callable(self):
        """Should reject a focus setting that is neither bool nor callable."""
        with pytest.raises(FormConfigError):
            FormOptions.from_dict({"shouldFocusError": "yes"})

    def test_to_dict_round_trip(self):
        """Should serialize back to the camelCase dict it was built from."""
        data = {
            "mode": "onChange",
            "reValidateMode": "onBlur",
            "criteriaMode": "all",
            "defaultValues": {"a": 1},
            "shouldFocusError": True,
        }
        assert FormOptions.from_dict(data).to_dict() == data


class TestFromKeywords:
    """Test parsing snake_case keywords."""

    def test_keywords(self):
        """Should build options from snake_case keywords."""
        opts = FormOptions.from_keywords(mode="onChange", default_values={"a": "x"})
        assert opts.mode == ValidationMode.ON_CHANGE
        assert opts.get_default("a") == "x"

    def test_unknown_keyword(self):
        """Should reject an unknown keyword."""
        with pytest.raises(FormConfigError):
            FormOptions.from_keywords(resolver=None)


class TestAccessors:
    """Test derived accessors."""

    def test_missing_default_is_empty_string(self):
        """Should return an empty string for a field without a default."""
        assert FormOptions().get_default("anything") == ""

    def test_none_default_is_empty_string(self):
        """Should return an empty string for a None default."""
        opts = FormOptions.from_dict({"defaultValues": {"a": None}})
        assert opts.get_default("a") == ""

    def test_falsy_default_kept(self):
        """Should keep falsy defaults such as 0."""
        opts = FormOptions.from_dict({"defaultValues": {"count": 0}})
        assert opts.get_default("count") == 0

    def test_focus_setting_read_lazily(self):
        """Should call a callable focus setting on every read."""
        state = {"focus": False}
        opts = FormOptions.from_dict({"shouldFocusError": lambda: state["focus"]})
        assert opts.focus_on_error() is False
        state["focus"] = True
        assert opts.focus_on_error() is True
