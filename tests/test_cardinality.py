import pytest

from sparxxmi2uml.cardinality import (
    build_cardinality,
    cardinality_max_value,
    cardinality_min_value,
    parse_multiplicity,
)
from sparxxmi2uml.uml_model import UMLCardinality


@pytest.mark.parametrize(
    "lower, expected",
    [("0", "C"), ("1", "M"), ("2", None), ("*", None), (None, None)],
)
def test_cardinality_min_value(lower, expected):
    assert cardinality_min_value(lower) == expected


@pytest.mark.parametrize("upper", ["*", "1", "5", None])
def test_cardinality_max_value_is_passed_through(upper):
    assert cardinality_max_value(upper) == upper


def test_build_cardinality():
    assert build_cardinality("0", "*") == UMLCardinality(min="C", max="*")
    assert build_cardinality("1", "1") == UMLCardinality(min="M", max="1")


def test_partial_cardinality_is_absent():
    assert build_cardinality("1", None) is None
    assert build_cardinality(None, "*") is None
    assert build_cardinality("3", "5") is None


@pytest.mark.parametrize(
    "multiplicity, expected",
    [
        ("0..*", UMLCardinality(min="C", max="*")),
        ("1..*", UMLCardinality(min="M", max="*")),
        ("0..1", UMLCardinality(min="C", max="1")),
        ("*", UMLCardinality(min="M", max="*")),
        ("1", UMLCardinality(min="M", max="1")),
    ],
)
def test_parse_multiplicity(multiplicity, expected):
    assert parse_multiplicity(multiplicity) == expected


def test_parse_multiplicity_without_value():
    assert parse_multiplicity(None) is None
    assert parse_multiplicity("") is None


def test_parse_multiplicity_with_unmapped_lower_bound():
    assert parse_multiplicity("2..4") is None
