import argparse
import logging
import os
import re
import sys
import urllib.parse
from collections.abc import Iterator
from typing import Literal

from linkml_runtime import linkml_model
from linkml_runtime.utils.formatutils import uncamelcase, underscore
from linkml_runtime.utils.schema_as_dict import schema_as_yaml_dump

from sparxxmi2uml import XmiReadError, parse_file
from sparxxmi2uml.uml_model import (
    AssociationType,
    UMLAssociation,
    UMLAttribute,
    UMLCardinality,
    UMLClass,
    UMLDocument,
    UMLEnum,
    UMLPackage,
)

logger = logging.getLogger(__name__)

YAMLFilePath = os.PathLike | str
CURIE = str
DEFAULT_PREFIX = "uml"
DEFAULT_BASE_URI = "https://example.org/uml/"

LinkMLTypes = Literal[
    "string",
    "integer",
    "boolean",
    "float",
    "double",
    "decimal",
    "time",
    "date",
    "datetime",
    "uri",
]


def generate_curie(prefix: str, local_name: str) -> CURIE:
    return f"{prefix}:{urllib.parse.quote(local_name)}"


def slot_name(name: str) -> str:
    return underscore(uncamelcase(name))


def schema_name(name: str | None) -> str:
    sanitized = re.sub(r"[^A-Za-z0-9_.-]", "_", name or "")
    if not sanitized:
        return DEFAULT_PREFIX
    if not (sanitized[0].isalpha() or sanitized[0] == "_"):
        sanitized = f"_{sanitized}"
    return sanitized


def map_primitive_data_type(val: str | None) -> LinkMLTypes | None:
    match val:
        case "String" | "string" | "CharacterString" | "char":
            return "string"
        case "Integer" | "int" | "long" | "short":
            return "integer"
        case "Boolean" | "boolean" | "bool":
            return "boolean"
        case "Float" | "float" | "Real":
            return "float"
        case "Double" | "double":
            return "double"
        case "Decimal" | "decimal":
            return "decimal"
        case "Date":
            return "date"
        case "DateTime":
            return "datetime"
        case "Time":
            return "time"
        case "URI" | "anyURI":
            return "uri"
        case _:
            return None


def is_required(cardinality: UMLCardinality | None) -> bool:
    return cardinality is not None and cardinality.min == "M"


def is_multivalued(cardinality: UMLCardinality | None) -> bool:
    if cardinality is None:
        return False
    if cardinality.max in ("*", "n"):
        return True
    return cardinality.max.isdigit() and int(cardinality.max) > 1


def generate_attribute_slot(
    owner: UMLClass, attribute: UMLAttribute, prefix: str
) -> linkml_model.SlotDefinition:
    return linkml_model.SlotDefinition(
        name=slot_name(attribute.name),
        range=map_primitive_data_type(attribute.type) or attribute.type,
        description=attribute.definition,
        required=is_required(attribute.cardinality),
        multivalued=is_multivalued(attribute.cardinality),
        slot_uri=generate_curie(prefix, f"{owner.name}.{attribute.name}"),
    )


def generate_association_slot(
    owner: UMLClass, association: UMLAssociation, prefix: str
) -> linkml_model.SlotDefinition:
    role_name = association.member_end_attribute_name or association.member_end
    return linkml_model.SlotDefinition(
        name=slot_name(role_name),
        range=association.member_end,
        description=association.definition,
        required=is_required(association.member_end_cardinality),
        multivalued=is_multivalued(association.member_end_cardinality),
        slot_uri=generate_curie(prefix, f"{owner.name}.{role_name}"),
    )


def generate_class(uml_class: UMLClass, prefix: str) -> linkml_model.ClassDefinition:
    attributes = {
        slot.name: slot
        for slot in (
            generate_attribute_slot(uml_class, attr, prefix)
            for attr in uml_class.attributes
            if attr.name
        )
    }

    super_class_name = None
    for association in uml_class.associations:
        match association.member_end_type:
            case AssociationType.INHERITANCE:
                super_class_name = association.member_end
            case AssociationType.GENERALIZATION:
                # Described on the subclass.
                continue
            case _:
                slot = generate_association_slot(uml_class, association, prefix)
                attributes.setdefault(slot.name, slot)

    return linkml_model.ClassDefinition(
        name=uml_class.name,
        is_a=super_class_name,
        abstract=uml_class.is_abstract,
        class_uri=generate_curie(prefix, uml_class.name),
        attributes=attributes,
        description=uml_class.definition,
    )


def generate_enum(uml_enum: UMLEnum, prefix: str) -> linkml_model.EnumDefinition:
    return linkml_model.EnumDefinition(
        name=uml_enum.name,
        enum_uri=generate_curie(prefix, uml_enum.name),
        description=uml_enum.definition,
        permissible_values={
            literal.name: linkml_model.PermissibleValue(
                text=literal.name,
                description=literal.definition,
                meaning=generate_curie(prefix, f"{uml_enum.name}.{literal.name}"),
            )
            for literal in uml_enum.values
            if literal.name
        },
    )


def iter_packages(
    packages: tuple[UMLPackage, ...],
) -> Iterator[tuple[UMLPackage, list[str]]]:
    """Pre-order walk yielding each package with its name path from the root."""
    pending = [(package, [package.name]) for package in reversed(packages)]
    while pending:
        package, path = pending.pop()
        yield package, path
        pending.extend((child, path + [child.name]) for child in reversed(package.packages))


def add_package_to_schema(
    schema: linkml_model.SchemaDefinition,
    package: UMLPackage,
    prefix: str,
    own_data_types_only: bool = False,
) -> None:
    data_types = package.data_types
    if own_data_types_only:
        data_types = tuple(d for d in data_types if d.package_id == package.id)

    for uml_class in (*package.classes, *data_types):
        if not uml_class.name or uml_class.stereotype == "Primitive":
            continue
        schema.classes[uml_class.name] = generate_class(uml_class, prefix)

    for uml_enum in package.enums:
        if uml_enum.name:
            schema.enums[uml_enum.name] = generate_enum(uml_enum, prefix)


def build_schema(
    document: UMLDocument,
    package: UMLPackage | None = None,
    pkg_path_parts: list[str] | None = None,
    prefix: str = DEFAULT_PREFIX,
    base_uri: str = DEFAULT_BASE_URI,
) -> linkml_model.SchemaDefinition:
    if package:
        name = schema_name(package.name)
        schema_id = f"{base_uri}{'/'.join(urllib.parse.quote(p or '') for p in pkg_path_parts or [])}"
    else:
        name = schema_name(document.name)
        schema_id = f"{base_uri}{urllib.parse.quote(name)}"

    schema = linkml_model.SchemaDefinition(
        id=schema_id,
        name=name,
        title=package.name if package else document.name,
        prefixes={prefix: f"{base_uri}ns#", "linkml": "https://w3id.org/linkml/"},
        default_prefix=prefix,
        default_range="string",
        imports=["linkml:types"],
    )

    if package:
        add_package_to_schema(schema, package, prefix, own_data_types_only=True)
    else:
        for pkg, _ in iter_packages(document.packages):
            add_package_to_schema(schema, pkg, prefix)

    return schema


def write_schema(schema: linkml_model.SchemaDefinition, output: YAMLFilePath) -> None:
    with open(output, "w", encoding="utf-8") as f:
        f.write(schema_as_yaml_dump(schema))


def generate_schema(
    xmi_file: YAMLFilePath,
    output: YAMLFilePath = "out.yml",
    schema_per_package: bool = False,
    prefix: str = DEFAULT_PREFIX,
    base_uri: str = DEFAULT_BASE_URI,
) -> list[str]:
    """Write LinkML schema(s) for an XMI file and return the paths written.

    With `schema_per_package`, `output` is a directory and every package with
    classes or enums gets its own file, laid out by package path.
    """
    document = parse_file(xmi_file)
    written = []

    if schema_per_package:
        for package, pkg_path_parts in iter_packages(document.packages):
            if not (package.classes or package.enums or package.data_types):
                continue

            parts = [schema_name(p) for p in pkg_path_parts]
            pkg_dirpath = os.path.join(output, *parts[:-1])
            os.makedirs(pkg_dirpath, exist_ok=True)
            path = os.path.join(pkg_dirpath, parts[-1] + ".yml")

            schema = build_schema(document, package, pkg_path_parts, prefix, base_uri)
            write_schema(schema, path)
            written.append(path)
    else:
        schema = build_schema(document, prefix=prefix, base_uri=base_uri)
        write_schema(schema, output)
        written.append(os.fspath(output))

    logger.info("Wrote %d schema file(s) for %s", len(written), xmi_file)
    return written


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sparxxmi2uml",
        description="Convert a Sparx EA XMI export into LinkML schema(s).",
    )
    parser.add_argument("xmi_file", help="XMI file to convert")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="output YAML file, or directory with --schema-per-package (default: out.yml / out)",
    )
    parser.add_argument(
        "--schema-per-package",
        action="store_true",
        help="write one schema per package",
    )
    parser.add_argument("--prefix", default=DEFAULT_PREFIX, help="CURIE prefix for generated URIs")
    parser.add_argument("--base-uri", default=DEFAULT_BASE_URI, help="base URI of generated schemas")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    output = args.output or ("out" if args.schema_per_package else "out.yml")
    try:
        generate_schema(
            args.xmi_file,
            output,
            schema_per_package=args.schema_per_package,
            prefix=args.prefix,
            base_uri=args.base_uri,
        )
    except XmiReadError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
