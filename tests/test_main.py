import os

import pytest
import yaml

from sparxxmi2uml.main import (
    build_schema,
    generate_schema,
    is_multivalued,
    is_required,
    iter_packages,
    main,
    map_primitive_data_type,
    schema_name,
)
from sparxxmi2uml.uml_model import UMLCardinality


@pytest.mark.parametrize(
    "uml_type, expected",
    [
        ("String", "string"),
        ("int", "integer"),
        ("Boolean", "boolean"),
        ("DateTime", "datetime"),
        ("Money", None),
        (None, None),
    ],
)
def test_map_primitive_data_type(uml_type, expected):
    assert map_primitive_data_type(uml_type) == expected


def test_required_and_multivalued():
    assert is_required(UMLCardinality(min="M", max="1"))
    assert not is_required(UMLCardinality(min="C", max="1"))
    assert not is_required(None)
    assert is_multivalued(UMLCardinality(min="C", max="*"))
    assert is_multivalued(UMLCardinality(min="M", max="3"))
    assert not is_multivalued(UMLCardinality(min="M", max="1"))
    assert not is_multivalued(None)


def test_schema_name():
    assert schema_name("EA_Model") == "EA_Model"
    assert schema_name("Shop Domain") == "Shop_Domain"
    assert schema_name("2024 model") == "_2024_model"
    assert schema_name(None) == "uml"


def test_iter_packages_yields_paths(shop_document):
    assert [path for _, path in iter_packages(shop_document.packages)] == [["P"], ["P", "Q"]]


def test_build_schema_classes(shop_document):
    schema = build_schema(shop_document)

    assert set(schema.classes) == {"A", "B", "C", "D", "E", "Money", "Percentage"}

    a = schema.classes["A"]
    assert a.is_a == "C"
    assert a.description == "An order"
    assert a.class_uri == "uml:A"

    name = a.attributes["name"]
    assert name.range == "string"
    assert name.required
    assert not name.multivalued

    assert a.attributes["total"].range == "Money"

    bs = a.attributes["bs"]
    assert bs.range == "B"
    assert bs.multivalued
    assert not bs.required
    assert bs.description == "Bs of an A"

    assert schema.classes["D"].attributes["parts"].range == "A"


def test_build_schema_enums(shop_document):
    schema = build_schema(shop_document)

    colour = schema.enums["Colour"]
    assert set(colour.permissible_values) == {"RED", "GREEN"}
    assert colour.permissible_values["RED"].description == "Red"


def test_build_schema_for_package(shop_document):
    q = shop_document.packages[0].packages[0]

    schema = build_schema(shop_document, q, ["P", "Q"], prefix="shop", base_uri="https://example.org/shop/")

    assert schema.id == "https://example.org/shop/P/Q"
    assert schema.name == "Q"
    assert set(schema.classes) == {"E", "Percentage"}
    assert schema.classes["E"].class_uri == "shop:E"


def test_generate_single_schema(shop_xmi_path, tmp_path):
    output = tmp_path / "shop.yml"

    written = generate_schema(shop_xmi_path, output)

    assert written == [os.fspath(output)]
    loaded = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert loaded["name"] == "EA_Model"
    assert loaded["classes"]["A"]["is_a"] == "C"
    assert "Colour" in loaded["enums"]


def test_generate_schema_per_package(shop_xmi_path, tmp_path):
    output = tmp_path / "out"

    written = generate_schema(shop_xmi_path, output, schema_per_package=True)

    assert written == [
        os.path.join(output, "P.yml"),
        os.path.join(output, "P", "Q.yml"),
    ]
    assert all(os.path.exists(path) for path in written)


def test_cli(shop_xmi_path, tmp_path):
    output = tmp_path / "cli.yml"

    assert main([str(shop_xmi_path), "-o", str(output), "--log-level", "WARNING"]) == 0
    assert output.exists()


def test_cli_reports_unreadable_source(tmp_path, caplog):
    broken = tmp_path / "broken.xmi"
    broken.write_text("<xmi:XMI>", encoding="utf-8")

    assert main([str(broken), "-o", str(tmp_path / "out.yml")]) == 1
    assert not (tmp_path / "out.yml").exists()
    assert "Cannot read XMI document" in caplog.text
