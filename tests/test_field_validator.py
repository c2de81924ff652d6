import pytest

from glow_wizard.services.profile_service import validate_profile_data
from glow_wizard.utils.field_validator import FieldRule, validate_fields


class TestProfileValidation:
    """Profile records against the built-in field rules"""

    def test_valid_profile(self, valid_profile):
        result = validate_profile_data(valid_profile)

        assert result.valid is True
        assert result.errors == []
        assert bool(result) is True

    def test_non_object_input(self):
        result = validate_profile_data(["not", "a", "profile"])

        assert result.valid is False
        assert result.errors == ["Profile data must be an object."]

    def test_missing_fields_reported_in_rule_order(self):
        result = validate_profile_data({})

        assert result.errors == [
            "Missing required field: name",
            "Missing required field: age",
            "Missing required field: skinType",
            "Missing required field: concerns",
            "Missing required field: location",
        ]

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_value_counts_as_missing(self, valid_profile, blank):
        valid_profile["location"] = blank

        result = validate_profile_data(valid_profile)

        # No length error alongside the missing error
        assert result.errors == ["Missing required field: location"]

    @pytest.mark.parametrize("age", [13, 120, 13.0])
    def test_age_bounds_are_inclusive(self, valid_profile, age):
        valid_profile["age"] = age
        assert validate_profile_data(valid_profile).valid is True

    def test_age_below_minimum(self, valid_profile):
        valid_profile["age"] = 12

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field age must be at least 13."]

    def test_age_above_maximum(self, valid_profile):
        valid_profile["age"] = 121

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field age must be at most 120."]

    @pytest.mark.parametrize("age", ["29", True])
    def test_age_must_be_numeric(self, valid_profile, age):
        valid_profile["age"] = age

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field age must be a number."]

    def test_disallowed_concerns_are_named(self, valid_profile):
        valid_profile["concerns"] = ["acne", "freckles", "redness", "tattoos"]

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field concerns contains invalid values: freckles, tattoos."]

    def test_concerns_must_be_array(self, valid_profile):
        valid_profile["concerns"] = "acne"

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field concerns must be an array."]

    def test_unknown_skin_type(self, valid_profile):
        valid_profile["skinType"] = "scaly"

        result = validate_profile_data(valid_profile)

        assert result.errors == [
            "Field skinType must be one of: dry, oily, combination, normal, sensitive."
        ]

    def test_short_location(self, valid_profile):
        valid_profile["location"] = "X"

        result = validate_profile_data(valid_profile)

        assert result.errors == ["Field location must be at least 2 characters."]

    def test_all_violations_are_collected(self, valid_profile):
        valid_profile.update({"age": 200, "skinType": "scaly", "location": "X"})

        result = validate_profile_data(valid_profile)

        assert len(result.errors) == 3


class TestFieldRules:
    """Checks run independently for custom rule sets"""

    def test_type_and_allowed_errors_together(self):
        rules = [FieldRule(key="tier", type="string", allowed=("free", "premium"))]

        result = validate_fields({"tier": 5}, rules, subject="Plan")

        assert result.errors == [
            "Field tier must be a string.",
            "Field tier must be one of: free, premium.",
        ]

    def test_fractional_bounds(self):
        rules = [FieldRule(key="ratio", type="number", min=0.5, max=1.5)]

        result = validate_fields({"ratio": 0.25}, rules)

        assert result.errors == ["Field ratio must be at least 0.5."]

    def test_custom_subject(self):
        result = validate_fields("nope", [], subject="Plan")

        assert result.errors == ["Plan must be an object."]
