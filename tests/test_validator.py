import pytest

from ai_analyst.charts import ChartSpecValidator, InvalidChartSpecError


@pytest.fixture
def validator():
    return ChartSpecValidator()


def test_valid_candidate_becomes_spec(validator):
    spec = validator.validate({
        "type": "line",
        "title": "Monthly revenue",
        "description": "Trend",
        "data": [{"month": "Jan", "revenue": 10}, {"month": "Feb", "revenue": 12}]
    })

    assert spec.type == "line"
    assert spec.title == "Monthly revenue"
    assert spec.description == "Trend"
    assert len(spec.data) == 2
    assert spec.is_supported
    assert not spec.is_scatter


def test_unknown_type_is_kept(validator):
    spec = validator.validate({"type": "radar", "data": [{"a": "x", "b": 1}]})

    assert spec.type == "radar"
    assert not spec.is_supported


def test_missing_type_becomes_empty_string(validator):
    spec = validator.validate({"data": [{"a": "x", "b": 1}]})

    assert spec.type == ""
    assert spec.title is None


def test_non_string_title_is_coerced(validator):
    spec = validator.validate({"type": "bar", "title": 2024, "data": [{"a": "x", "b": 1}]})

    assert spec.title == "2024"


@pytest.mark.parametrize("candidate", [
    [1, 2, 3],
    "bar",
    {"type": "bar"},
    {"type": "bar", "data": "North,South"},
    {"type": "bar", "data": []},
    {"type": "bar", "data": [1, 2]},
    {"type": "bar", "data": [{"a": 1}, "b"]},
    {"type": "bar", "data": [{}]},
])
def test_unusable_candidates_are_rejected(validator, candidate):
    with pytest.raises(InvalidChartSpecError):
        validator.validate(candidate)


def test_validate_all_skips_rejected_and_keeps_order(validator):
    specs = validator.validate_all([
        {"type": "pie", "data": [{"a": "x", "b": 1}]},
        {"type": "bar", "data": []},
        {"type": "area", "data": [{"a": "y", "b": 2}]},
    ])

    assert [spec.type for spec in specs] == ["pie", "area"]


def test_to_dict_includes_roles_slot(validator):
    spec = validator.validate({"type": "bar", "data": [{"a": "x", "b": 1}]})

    assert spec.to_dict() == {
        "type": "bar",
        "title": None,
        "description": None,
        "data": [{"a": "x", "b": 1}],
        "roles": None
    }
