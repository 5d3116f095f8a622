"""Resolve the extension-tree links of a class into `UMLAssociation` records.

Each link names a `start` and an `end` element. Relative to the class being
serialized the class's own side is the owner end and the opposite side is the
member end. Generalizations are read as inheritance (the class is the
subtype) or generalization (the class is the supertype). Associations take
their cardinality, role name and documentation from the matching `connector`
node. Other structural links are treated as aggregations keyed on an owned
attribute.
"""

import logging

from lxml import etree

from sparxxmi2uml.cardinality import build_cardinality, parse_multiplicity
from sparxxmi2uml.context import ParseContext
from sparxxmi2uml.uml_model import (
    AssociationType,
    LinkKind,
    LinkSide,
    UMLAssociation,
    UMLCardinality,
    XmiID,
)
from sparxxmi2uml.xmi_model import XmiLink

logger = logging.getLogger(__name__)

AGGREGATION_KINDS = {"shared", "composite"}

EndDetails = tuple[UMLCardinality | None, str | None]


def link_end_id(link: XmiLink, side: LinkSide) -> XmiID | None:
    return link.start if side is LinkSide.START else link.end


def owner_side(link: XmiLink, xmi_id: XmiID) -> LinkSide | None:
    if link.start == xmi_id:
        return LinkSide.START
    if link.end == xmi_id:
        return LinkSide.END
    return None


def fetch_connector_end(ctx: ParseContext, link_id: XmiID | None, side: LinkSide) -> EndDetails:
    """Cardinality and role name from `//connector[@xmi:idref=link_id]/(source|target)`."""
    if link_id is None:
        return None, None

    connector_end = ctx.tree.connector_end(link_id, side)
    if connector_end is None:
        logger.debug("No %s connector end for link %s", side.connector_end, link_id)
        return None, None

    cardinality = None
    type_node = connector_end.find("type")
    if type_node is not None:
        cardinality = parse_multiplicity(type_node.get("multiplicity"))

    attribute_name = None
    role_node = connector_end.find("role")
    if role_node is not None:
        attribute_name = role_node.get("name") or None

    return cardinality, attribute_name


def fetch_owned_attribute_end(ctx: ParseContext, xmi_id: XmiID) -> EndDetails:
    """Cardinality and name of the first association-owned attribute typed by `xmi_id`."""
    owned_attribute = ctx.tree.owned_attribute_by_type(xmi_id)
    if owned_attribute is None:
        return None, None

    cardinality = build_cardinality(
        _first_value(owned_attribute, "lowerValue"),
        _first_value(owned_attribute, "upperValue"),
    )

    return cardinality, owned_attribute.get("name") or None


def _first_value(node: etree._Element, tag: str) -> str | None:
    values = node.xpath(f".//{tag}/@value")
    return str(values[0]) if values else None


def is_aggregation_connector(ctx: ParseContext, link_id: XmiID | None) -> bool:
    if link_id is None:
        return False

    for connector_end in ctx.tree.connector_ends(link_id):
        type_node = connector_end.find("type")
        if type_node is not None and type_node.get("aggregation") in AGGREGATION_KINDS:
            return True

    return False


def fetch_definition(ctx: ParseContext, link_id: XmiID | None, side: LinkSide) -> str | None:
    if link_id is None:
        return None

    connector_end = ctx.tree.connector_end(link_id, side)
    if connector_end is None:
        return None

    documentation = connector_end.find("documentation")
    if documentation is None:
        return None

    return documentation.get("value")


def resolve_link(ctx: ParseContext, xmi_id: XmiID, link: XmiLink) -> UMLAssociation | None:
    if link.kind is LinkKind.NOTELINK:
        return None

    side = owner_side(link, xmi_id)
    if side is None:
        logger.debug("Link %s does not involve %s, skipping", link.id, xmi_id)
        return None

    member_side = side.opposite
    member_id = link_end_id(link, member_side)
    if member_id is None:
        logger.debug("Link %s has no %s element", link.id, member_side.name.lower())
        return None

    match link.kind:
        case LinkKind.GENERALIZATION:
            if side is LinkSide.START:
                member_end_type = AssociationType.INHERITANCE
            else:
                member_end_type = AssociationType.GENERALIZATION
            cardinality, _ = fetch_owned_attribute_end(ctx, member_id)
            attribute_name = None
        case LinkKind.ASSOCIATION:
            if is_aggregation_connector(ctx, link.id):
                member_end_type = AssociationType.AGGREGATION
            else:
                member_end_type = AssociationType.PLAIN
            cardinality, attribute_name = fetch_connector_end(ctx, link.id, member_side)
        case _:
            member_end_type = AssociationType.AGGREGATION
            cardinality, attribute_name = fetch_owned_attribute_end(ctx, member_id)

    return UMLAssociation(
        id=link.id,
        member_end=ctx.lookup_name(member_id) or member_id,
        member_end_type=member_end_type,
        member_end_cardinality=cardinality,
        member_end_attribute_name=attribute_name,
        member_end_id=member_id,
        owner_end=ctx.lookup_name(xmi_id) or xmi_id,
        owner_end_id=xmi_id,
        definition=fetch_definition(ctx, link.id, member_side),
    )


def keep_association(association: UMLAssociation) -> bool:
    """Aggregations are only kept when their owned-attribute role was identified."""
    if association.member_end_type is not AssociationType.AGGREGATION:
        return True

    return bool(association.member_end_attribute_name)


def serialize_associations(ctx: ParseContext, xmi_id: XmiID | None) -> tuple[UMLAssociation, ...]:
    if xmi_id is None:
        return ()

    element = ctx.model.element_by_idref(xmi_id)
    if element is None:
        logger.debug("No extension element for %s", xmi_id)
        return ()

    associations = []
    for link in element.links:
        association = resolve_link(ctx, xmi_id, link)
        if association is None:
            continue
        if not keep_association(association):
            logger.debug(
                "Dropping aggregation %s towards %s without attribute name",
                association.id,
                association.member_end,
            )
            continue
        associations.append(association)

    # The same link shows up once per direction walked.
    return tuple(dict.fromkeys(associations))
