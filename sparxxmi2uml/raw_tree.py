import logging

from lxml import etree

from sparxxmi2uml.uml_model import LinkSide, XmiID
from sparxxmi2uml.xmi_model import namespaces_of

logger = logging.getLogger(__name__)


class RawDocumentTree:
    """Path queries against the whole XMI file, keyed on identifier strings.

    Covers what the bound model does not expose: documentation, stereotypes,
    diagram membership and the connector nodes of the extension section.
    Every query returns ``None`` (or an empty list) when nothing matches.
    """

    def __init__(self, root: etree._Element) -> None:
        self.root = root
        self.namespaces = namespaces_of(root)

    def xpath(self, query: str, **variables: str) -> list:
        return self.root.xpath(query, namespaces=self.namespaces, **variables)

    def xmi_id(self, node: etree._Element) -> XmiID | None:
        return node.get(f"{{{self.namespaces['xmi']}}}id")

    def first(self, query: str, **variables: str):
        matches = self.xpath(query, **variables)
        if not matches:
            return None

        match = matches[0]
        # Attribute results are smart strings holding a reference to their element.
        return str(match) if isinstance(match, str) else match

    # ---------------- extension elements ----------------

    def element_properties(self, xmi_id: XmiID) -> etree._Element | None:
        """xpath: //element[@xmi:idref=$id]/properties"""
        return self.first("//element[@xmi:idref=$id]/properties", id=xmi_id)

    def element_property(self, xmi_id: XmiID, attr_name: str) -> str | None:
        properties = self.element_properties(xmi_id)
        if properties is None:
            return None

        return properties.get(attr_name)

    def element_constraints(self, xmi_id: XmiID) -> list[etree._Element]:
        return self.xpath("//element[@xmi:idref=$id]/constraints/constraint", id=xmi_id)

    def feature_documentation(self, xmi_id: XmiID) -> str | None:
        """Documentation of an attribute, operation or literal by its id."""
        return self.first(
            "//*[self::attribute or self::operation][@xmi:idref=$id]/documentation/@value",
            id=xmi_id,
        )

    def attribute_type_name(self, xmi_id: XmiID) -> str | None:
        return self.first("//attribute[@xmi:idref=$id]/properties/@type", id=xmi_id)

    # ---------------- diagrams ----------------

    def package_diagrams(self, package_id: XmiID) -> list[etree._Element]:
        return [
            model.getparent()
            for model in self.xpath("//diagrams/diagram/model[@package=$id]", id=package_id)
        ]

    # ---------------- connectors ----------------

    def connector_end(self, link_id: XmiID, side: LinkSide) -> etree._Element | None:
        return self.first(
            f"//connector[@xmi:idref=$id]/{side.connector_end}",
            id=link_id,
        )

    def connector_ends(self, link_id: XmiID) -> list[etree._Element]:
        return self.xpath("//connector[@xmi:idref=$id]/*[self::source or self::target]", id=link_id)

    def connector_model_name(self, xmi_id: XmiID) -> str | None:
        """Name stored on the `model` node of any connector end pointing at the id."""
        return self.first(
            "(//source[@xmi:idref=$id] | //target[@xmi:idref=$id])/model/@name",
            id=xmi_id,
        )

    # ---------------- uml:Model ----------------

    def owned_attribute_by_type(self, xmi_id: XmiID) -> etree._Element | None:
        """xpath: //ownedAttribute[@association]/type[@xmi:idref=$id], returns the ownedAttribute"""
        type_node = self.first("//ownedAttribute[@association]/type[@xmi:idref=$id]", id=xmi_id)
        if type_node is None:
            return None

        return type_node.getparent()

    def name_by_id(self, xmi_id: XmiID) -> str | None:
        return self.first("//*[@xmi:id=$id]/@name", id=xmi_id)
