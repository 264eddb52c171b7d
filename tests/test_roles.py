import copy

import pytest

from ai_analyst.charts import (
    ChartSpec,
    InsufficientDimensionality,
    Resolved,
    ResolvedScatter,
    infer_roles,
    infer_roles_for_spec,
)
from ai_analyst.charts.roles import partition_keys


def test_category_and_value_from_first_record():
    data = [{"region": "North", "sales": 100}, {"region": "South", "sales": 80}]

    assert infer_roles(data, is_scatter=False) == Resolved(category_key="region", value_key="sales")


def test_first_string_key_wins_regardless_of_position():
    data = [{"units": 3, "revenue": 99.5, "product": "Widget"}]

    assert infer_roles(data, is_scatter=False) == Resolved(category_key="product", value_key="units")


def test_no_string_field_uses_first_key_as_category():
    data = [{"month": 1, "rentals": 1200}]

    assert infer_roles(data, is_scatter=False) == Resolved(category_key="month", value_key="rentals")


def test_no_numeric_field_falls_back_to_next_key():
    data = [{"name": "A", "status": "open"}]

    assert infer_roles(data, is_scatter=False) == Resolved(category_key="name", value_key="status")


def test_single_field_reuses_category_as_value():
    assert infer_roles([{"name": "A"}], is_scatter=False) == Resolved(category_key="name", value_key="name")


def test_booleans_are_not_numbers():
    data = [{"label": "x", "active": True, "score": 4}]

    assert partition_keys(data[0]) == (["label"], ["score"])
    assert infer_roles(data, is_scatter=False).value_key == "score"


def test_scatter_uses_first_two_numeric_keys():
    data = [{"name": "a", "height": 170, "weight": 65.5, "age": 30}]

    assert infer_roles(data, is_scatter=True) == ResolvedScatter(x_key="height", y_key="weight")


@pytest.mark.parametrize("record", [
    {"name": "a", "height": 170},
    {"name": "a", "flag": True, "other": False},
])
def test_scatter_without_two_numbers_is_insufficient(record):
    assert infer_roles([record], is_scatter=True) == InsufficientDimensionality()


@pytest.mark.parametrize("data", [[], None, [{}]])
def test_empty_data_is_insufficient(data):
    assert isinstance(infer_roles(data, is_scatter=False), InsufficientDimensionality)


def test_inference_is_pure():
    data = [{"region": "North", "sales": 100}, {"region": "South", "sales": 80}]
    before = copy.deepcopy(data)

    first = infer_roles(data, is_scatter=False)
    second = infer_roles(data, is_scatter=False)

    assert first == second
    assert data == before


def test_infer_roles_for_spec_uses_chart_type():
    spec = ChartSpec(type="scatter", data=[{"x": 1, "y": 2}])

    assert infer_roles_for_spec(spec) == ResolvedScatter(x_key="x", y_key="y")


def test_role_assignments_serialize_with_kind():
    assert Resolved("region", "sales").to_dict() == {
        "kind": "resolved", "category_key": "region", "value_key": "sales"
    }
    assert InsufficientDimensionality().to_dict() == {"kind": "insufficient_dimensionality"}
