from sparxxmi2uml.uml_model import UMLCardinality, UMLCardinalityMax, UMLCardinalityMin

# "C"onditional / "M"andatory
LOWER_VALUE_MAPPINGS: dict[str, UMLCardinalityMin] = {
    "0": "C",
    "1": "M",
}


def cardinality_min_value(value: str | None) -> UMLCardinalityMin | None:
    if value is None:
        return None

    return LOWER_VALUE_MAPPINGS.get(value)


def cardinality_max_value(value: str | None) -> UMLCardinalityMax | None:
    return value


def build_cardinality(lower: str | None, upper: str | None) -> UMLCardinality | None:
    """Map raw lower/upper bounds; a cardinality missing either bound is absent."""
    min_ = cardinality_min_value(lower)
    max_ = cardinality_max_value(upper)

    if min_ is None or max_ is None:
        return None

    return UMLCardinality(min=min_, max=max_)


def parse_multiplicity(val: str | None) -> UMLCardinality | None:
    """Parse a connector multiplicity such as ``0..*``.

    A bare value is an upper bound with an implicit lower bound of ``1``.
    """
    if not val:
        return None

    lower, _, upper = val.strip().partition("..")

    if upper == "":
        lower, upper = "1", lower

    return build_cardinality(lower, upper)
