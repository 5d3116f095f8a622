import html
import logging

from sparxxmi2uml.associations import serialize_associations
from sparxxmi2uml.cardinality import build_cardinality
from sparxxmi2uml.context import ParseContext
from sparxxmi2uml.uml_model import (
    UMLAttribute,
    UMLClass,
    UMLConstraint,
    UMLDataType,
    UMLDiagram,
    UMLEnum,
    UMLEnumLiteral,
    UMLOperation,
    UMLPackage,
    XmiID,
)
from sparxxmi2uml.xmi_model import XmiModel, XmiPackagedElement

logger = logging.getLogger(__name__)

PACKAGE_TYPE = "uml:Package"
CLASS_TYPES = ("uml:Class", "uml:AssociationClass")
ENUM_TYPE = "uml:Enumeration"
DATA_TYPE = "uml:DataType"
PROPERTY_TYPE = "uml:Property"


def to_bool(value: str | None) -> bool | None:
    if value is None:
        return None

    return value.strip().lower() == "true"


def doc_node_attribute_value(ctx: ParseContext, xmi_id: XmiID | None, attr_name: str) -> str | None:
    """xpath: //element[@xmi:idref=xmi_id]/properties/@attr_name"""
    if xmi_id is None:
        return None

    return ctx.tree.element_property(xmi_id, attr_name)


def lookup_feature_documentation(ctx: ParseContext, xmi_id: XmiID | None) -> str | None:
    if xmi_id is None:
        return None

    return ctx.tree.feature_documentation(xmi_id)


def select_all_packaged_elements(
    node: XmiPackagedElement, xmi_type: str
) -> list[tuple[XmiPackagedElement, XmiID | None]]:
    """All descendants of `node` of the given type, with the id of their direct owner.

    Descends into nested packages too, in document order.
    """
    selected = []
    pending = [(child, node.id) for child in reversed(node.packaged_elements)]

    while pending:
        current, owner_id = pending.pop()
        if current.is_type(xmi_type):
            selected.append((current, owner_id))
        pending.extend((child, current.id) for child in reversed(current.packaged_elements))

    return selected


# ---------------- features ----------------


def serialize_class_attributes(
    ctx: ParseContext, klass: XmiPackagedElement
) -> tuple[UMLAttribute, ...]:
    attributes = []
    for attribute in klass.owned_attributes:
        # Association ends are reported as associations.
        if not attribute.is_type(PROPERTY_TYPE) or attribute.association is not None:
            continue

        type_id = attribute.type_idref
        type_name = ctx.lookup_name(type_id)
        if type_name is None and attribute.id is not None:
            type_name = ctx.tree.attribute_type_name(attribute.id)

        attributes.append(
            UMLAttribute(
                id=attribute.id,
                name=attribute.name,
                type=type_name or type_id,
                type_id=type_id,
                is_derived=attribute.is_derived,
                cardinality=build_cardinality(attribute.lower_value, attribute.upper_value),
                definition=lookup_feature_documentation(ctx, attribute.id),
            )
        )

    return tuple(attributes)


def serialize_class_operations(
    ctx: ParseContext, klass: XmiPackagedElement
) -> tuple[UMLOperation, ...]:
    return tuple(
        UMLOperation(
            id=operation.id,
            return_type_id=operation.type_idref,
            name=operation.name,
            definition=lookup_feature_documentation(ctx, operation.id),
        )
        for operation in klass.owned_operations
        if operation.association is None
    )


def serialize_class_constraints(
    ctx: ParseContext, klass: XmiPackagedElement
) -> tuple[UMLConstraint, ...]:
    if klass.id is None:
        return ()

    constraints = []
    for constraint in ctx.tree.element_constraints(klass.id):
        description = constraint.get("description")
        constraints.append(
            UMLConstraint(
                id=ctx.tree.xmi_id(constraint),
                body=constraint.get("name"),
                definition=html.unescape(description) if description is not None else None,
            )
        )

    return tuple(constraints)


# ---------------- packaged elements ----------------


def serialize_class(
    ctx: ParseContext, klass: XmiPackagedElement, package_id: XmiID | None, cls=UMLClass
) -> UMLClass:
    is_abstract = doc_node_attribute_value(ctx, klass.id, "isAbstract") or klass.is_abstract

    return cls(
        id=klass.id,
        name=klass.name,
        package_id=package_id,
        is_abstract=to_bool(is_abstract),
        definition=doc_node_attribute_value(ctx, klass.id, "documentation"),
        stereotype=doc_node_attribute_value(ctx, klass.id, "stereotype"),
        attributes=serialize_class_attributes(ctx, klass),
        operations=serialize_class_operations(ctx, klass),
        constraints=serialize_class_constraints(ctx, klass),
        associations=serialize_associations(ctx, klass.id),
    )


def serialize_model_classes(
    ctx: ParseContext, package: XmiPackagedElement
) -> tuple[UMLClass, ...]:
    return tuple(
        serialize_class(ctx, klass, package.id)
        for klass in package.packaged_elements
        if klass.is_type(*CLASS_TYPES)
    )


def serialize_model_data_types(
    ctx: ParseContext, package: XmiPackagedElement
) -> tuple[UMLDataType, ...]:
    return tuple(
        serialize_class(ctx, data_type, owner_id, cls=UMLDataType)
        for data_type, owner_id in select_all_packaged_elements(package, DATA_TYPE)
    )


def serialize_model_enums(ctx: ParseContext, package: XmiPackagedElement) -> tuple[UMLEnum, ...]:
    enums = []
    for enum in package.packaged_elements:
        if not enum.is_type(ENUM_TYPE):
            continue

        values = tuple(
            UMLEnumLiteral(
                id=literal.id,
                name=literal.name,
                type=literal.type,
                definition=lookup_feature_documentation(ctx, literal.id),
            )
            for literal in enum.owned_literals
        )
        enums.append(
            UMLEnum(
                id=enum.id,
                name=enum.name,
                definition=doc_node_attribute_value(ctx, enum.id, "documentation"),
                stereotype=doc_node_attribute_value(ctx, enum.id, "stereotype"),
                values=values,
            )
        )

    return tuple(enums)


def serialize_model_diagrams(
    ctx: ParseContext, package: XmiPackagedElement
) -> tuple[UMLDiagram, ...]:
    """xpath: //diagrams/diagram/model[@package=package.id]"""
    if package.id is None:
        return ()

    diagrams = []
    for diagram in ctx.tree.package_diagrams(package.id):
        properties = diagram.find("properties")
        if properties is None:
            name, definition = None, None
        else:
            name, definition = properties.get("name"), properties.get("documentation")
        diagrams.append(UMLDiagram(id=ctx.tree.xmi_id(diagram), name=name, definition=definition))

    return tuple(diagrams)


def serialize_package(
    ctx: ParseContext, package: XmiPackagedElement, packages: tuple[UMLPackage, ...]
) -> UMLPackage:
    uml_package = UMLPackage(
        id=package.id,
        name=package.name,
        definition=doc_node_attribute_value(ctx, package.id, "documentation"),
        stereotype=doc_node_attribute_value(ctx, package.id, "stereotype"),
        classes=serialize_model_classes(ctx, package),
        enums=serialize_model_enums(ctx, package),
        data_types=serialize_model_data_types(ctx, package),
        diagrams=serialize_model_diagrams(ctx, package),
        packages=packages,
    )
    logger.debug(
        "Serialized package %r: %d classes, %d enums, %d data types, %d diagrams",
        uml_package.name,
        len(uml_package.classes),
        len(uml_package.enums),
        len(uml_package.data_types),
        len(uml_package.diagrams),
    )

    return uml_package


def _subpackages(node: XmiModel | XmiPackagedElement) -> list[XmiPackagedElement]:
    return [e for e in node.packaged_elements if e.is_type(PACKAGE_TYPE)]


def serialize_packages(
    ctx: ParseContext, node: XmiModel | XmiPackagedElement
) -> tuple[UMLPackage, ...]:
    """Serialize the packages directly under `node`, and everything below them."""
    roots = _subpackages(node)
    built: dict[int, UMLPackage] = {}
    pending: list[tuple[XmiPackagedElement, bool]] = [(p, False) for p in reversed(roots)]

    # Post-order worklist: nested packages are built before their parent.
    while pending:
        package, expanded = pending.pop()
        children = _subpackages(package)
        if not expanded:
            pending.append((package, True))
            pending.extend((child, False) for child in reversed(children))
            continue

        built[id(package)] = serialize_package(
            ctx, package, tuple(built.pop(id(child)) for child in children)
        )

    return tuple(built.pop(id(package)) for package in roots)
