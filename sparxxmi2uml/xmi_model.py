"""Typed, read-only view over the ``uml:Model`` subtree of an XMI document.

Only the parts of the model that the serializer walks are bound: packaged
elements, owned attributes/operations/literals and the link lists stored in
the ``xmi:Extension/elements`` section.
"""

import logging
from dataclasses import dataclass
from functools import cached_property

from lxml import etree

from sparxxmi2uml.uml_model import LinkKind, XmiID

logger = logging.getLogger(__name__)

XMI_NS = "http://www.omg.org/spec/XMI/20131001"
UML_NS = "http://www.omg.org/spec/UML/20131001"


class XmiReadError(RuntimeError):
    """Raised when the source document cannot be read as an XMI model."""


@dataclass(frozen=True)
class XmiLink:
    id: XmiID | None
    kind: LinkKind
    start: XmiID | None
    end: XmiID | None


@dataclass(frozen=True)
class XmiElement:
    idref: XmiID | None
    type: str | None
    name: str | None
    links: tuple[XmiLink, ...] = ()


@dataclass(frozen=True)
class XmiOwnedAttribute:
    id: XmiID | None
    name: str | None
    type: str | None
    association: XmiID | None
    is_derived: bool
    type_idref: XmiID | None
    lower_value: str | None
    upper_value: str | None

    def is_type(self, xmi_type: str) -> bool:
        return self.type == xmi_type


@dataclass(frozen=True)
class XmiOwnedOperation:
    id: XmiID | None
    name: str | None
    association: XmiID | None
    type_idref: XmiID | None


@dataclass(frozen=True)
class XmiOwnedLiteral:
    id: XmiID | None
    name: str | None
    type: str | None


@dataclass(frozen=True)
class XmiPackagedElement:
    id: XmiID | None
    name: str | None
    type: str | None
    is_abstract: str | None = None
    packaged_elements: tuple["XmiPackagedElement", ...] = ()
    owned_attributes: tuple[XmiOwnedAttribute, ...] = ()
    owned_operations: tuple[XmiOwnedOperation, ...] = ()
    owned_literals: tuple[XmiOwnedLiteral, ...] = ()

    def is_type(self, *xmi_types: str) -> bool:
        return self.type in xmi_types


@dataclass(frozen=True)
class XmiModel:
    name: str | None
    packaged_elements: tuple[XmiPackagedElement, ...] = ()


@dataclass(frozen=True)
class XmiDocument:
    model: XmiModel
    elements: tuple[XmiElement, ...] = ()

    @cached_property
    def _elements_by_idref(self) -> dict[XmiID, XmiElement]:
        index: dict[XmiID, XmiElement] = {}
        for element in self.elements:
            if element.idref is not None:
                index.setdefault(element.idref, element)
        return index

    def element_by_idref(self, xmi_id: XmiID) -> XmiElement | None:
        return self._elements_by_idref.get(xmi_id)


def namespaces_of(root: etree._Element) -> dict[str, str]:
    nsmap = {k: v for k, v in root.nsmap.items() if k is not None}
    return {"xmi": nsmap.get("xmi", XMI_NS), "uml": nsmap.get("uml", UML_NS)}


def map_link_kind(val: str) -> LinkKind:
    match val:
        case "Abstraction":
            return LinkKind.ABSTRACTION
        case "Aggregation":
            return LinkKind.AGGREGATION
        case "Association":
            return LinkKind.ASSOCIATION
        case "Dependency":
            return LinkKind.DEPENDENCY
        case "Generalization":
            return LinkKind.GENERALIZATION
        case "InformationFlow":
            return LinkKind.INFORMATIONFLOW
        case "Nesting":
            return LinkKind.NESTING
        case "NoteLink":
            return LinkKind.NOTELINK
        case "Realisation" | "Realization":
            return LinkKind.REALISATION
        case "Usage":
            return LinkKind.USAGE
        case _:
            return LinkKind.OTHER


class _Binder:
    def __init__(self, namespaces: dict[str, str]) -> None:
        self.xmi_id = f"{{{namespaces['xmi']}}}id"
        self.xmi_idref = f"{{{namespaces['xmi']}}}idref"
        self.xmi_type = f"{{{namespaces['xmi']}}}type"

    def children(self, node: etree._Element, tag: str) -> list[etree._Element]:
        return [child for child in node if child.tag == tag]

    def child_value(self, node: etree._Element, tag: str) -> str | None:
        child = node.find(tag)
        return child.get("value") if child is not None else None

    def child_idref(self, node: etree._Element, tag: str) -> XmiID | None:
        child = node.find(tag)
        return child.get(self.xmi_idref) if child is not None else None

    def owned_attribute(self, node: etree._Element) -> XmiOwnedAttribute:
        return XmiOwnedAttribute(
            id=node.get(self.xmi_id),
            name=node.get("name"),
            type=node.get(self.xmi_type),
            association=node.get("association"),
            is_derived=node.get("isDerived", "false") == "true",
            type_idref=self.child_idref(node, "type"),
            lower_value=self.child_value(node, "lowerValue"),
            upper_value=self.child_value(node, "upperValue"),
        )

    def owned_operation(self, node: etree._Element) -> XmiOwnedOperation:
        type_idref = self.child_idref(node, "type")
        if type_idref is None:
            for param in self.children(node, "ownedParameter"):
                if param.get("direction") == "return":
                    type_idref = param.get("type") or self.child_idref(param, "type")
                    break

        return XmiOwnedOperation(
            id=node.get(self.xmi_id),
            name=node.get("name"),
            association=node.get("association"),
            type_idref=type_idref,
        )

    def owned_literal(self, node: etree._Element) -> XmiOwnedLiteral:
        return XmiOwnedLiteral(
            id=node.get(self.xmi_id),
            name=node.get("name"),
            type=node.get(self.xmi_type),
        )

    def packaged_element(self, node: etree._Element) -> XmiPackagedElement:
        # Iterative post-order build: package nesting has no depth bound and the
        # child lists kept in `pending` hold the proxies whose id() keys `built`.
        built: dict[int, XmiPackagedElement] = {}
        pending: list[tuple[etree._Element, list | None]] = [(node, None)]

        while pending:
            current, nested = pending.pop()
            if nested is None:
                nested = self.children(current, "packagedElement")
                pending.append((current, nested))
                pending.extend((child, None) for child in reversed(nested))
                continue

            built[id(current)] = XmiPackagedElement(
                id=current.get(self.xmi_id),
                name=current.get("name"),
                type=current.get(self.xmi_type),
                is_abstract=current.get("isAbstract"),
                packaged_elements=tuple(built.pop(id(child)) for child in nested),
                owned_attributes=tuple(
                    self.owned_attribute(a) for a in self.children(current, "ownedAttribute")
                ),
                owned_operations=tuple(
                    self.owned_operation(o) for o in self.children(current, "ownedOperation")
                ),
                owned_literals=tuple(
                    self.owned_literal(lit) for lit in self.children(current, "ownedLiteral")
                ),
            )

        return built[id(node)]

    def element(self, node: etree._Element) -> XmiElement:
        links = []
        for links_node in self.children(node, "links"):
            for link in links_node:
                if not isinstance(link.tag, str):
                    continue
                links.append(
                    XmiLink(
                        id=link.get(self.xmi_id),
                        kind=map_link_kind(etree.QName(link).localname),
                        start=link.get("start"),
                        end=link.get("end"),
                    )
                )

        return XmiElement(
            idref=node.get(self.xmi_idref),
            type=node.get(self.xmi_type),
            name=node.get("name"),
            links=tuple(links),
        )


def load_model(root: etree._Element) -> XmiDocument:
    """Bind the ``uml:Model`` and extension elements found under ``root``.

    Raises:
        XmiReadError: if the document holds no ``uml:Model`` element.
    """
    namespaces = namespaces_of(root)
    binder = _Binder(namespaces)

    model_nodes = root.xpath("//uml:Model", namespaces=namespaces)
    if not model_nodes:
        raise XmiReadError("Source document has no uml:Model element.")
    model_node = model_nodes[0]

    model = XmiModel(
        name=model_node.get("name"),
        packaged_elements=tuple(
            binder.packaged_element(child)
            for child in binder.children(model_node, "packagedElement")
        ),
    )
    elements = tuple(
        binder.element(node)
        for node in root.xpath("//xmi:Extension/elements/element", namespaces=namespaces)
    )
    logger.debug(
        "Bound model %r with %d top-level elements and %d extension elements",
        model.name,
        len(model.packaged_elements),
        len(elements),
    )

    return XmiDocument(model=model, elements=elements)
