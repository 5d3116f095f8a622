from dataclasses import dataclass
from enum import Enum, auto

XmiID = str
UMLElementName = str
UMLCardinalityMin = str
UMLCardinalityMax = str


class AssociationType(Enum):
    PLAIN = "plain"
    AGGREGATION = "aggregation"
    INHERITANCE = "inheritance"
    GENERALIZATION = "generalization"


class LinkKind(Enum):
    ABSTRACTION = auto()
    AGGREGATION = auto()
    ASSOCIATION = auto()
    DEPENDENCY = auto()
    GENERALIZATION = auto()
    INFORMATIONFLOW = auto()
    NESTING = auto()
    NOTELINK = auto()
    REALISATION = auto()
    USAGE = auto()
    OTHER = auto()


class LinkSide(Enum):
    START = auto()
    END = auto()

    @property
    def opposite(self) -> "LinkSide":
        return LinkSide.END if self is LinkSide.START else LinkSide.START

    @property
    def connector_end(self) -> str:
        """Name of the `connector` child describing this side of a link."""
        return "source" if self is LinkSide.START else "target"


@dataclass(frozen=True)
class UMLCardinality:
    min: UMLCardinalityMin
    max: UMLCardinalityMax


@dataclass(frozen=True)
class UMLAttribute:
    id: XmiID
    name: UMLElementName
    type: str | None
    type_id: XmiID | None
    is_derived: bool
    cardinality: UMLCardinality | None
    definition: str | None


@dataclass(frozen=True)
class UMLOperation:
    id: XmiID
    return_type_id: XmiID | None
    name: UMLElementName
    definition: str | None


@dataclass(frozen=True)
class UMLConstraint:
    id: XmiID | None
    body: str | None
    definition: str | None


@dataclass(frozen=True)
class UMLAssociation:
    id: XmiID
    member_end: UMLElementName
    member_end_type: AssociationType
    member_end_cardinality: UMLCardinality | None
    member_end_attribute_name: str | None
    member_end_id: XmiID
    owner_end: UMLElementName | None
    owner_end_id: XmiID
    definition: str | None


@dataclass(frozen=True)
class UMLClass:
    id: XmiID
    name: UMLElementName
    package_id: XmiID | None
    is_abstract: bool | None
    definition: str | None
    stereotype: str | None
    attributes: tuple[UMLAttribute, ...] = ()
    operations: tuple[UMLOperation, ...] = ()
    constraints: tuple[UMLConstraint, ...] = ()
    associations: tuple[UMLAssociation, ...] = ()


@dataclass(frozen=True)
class UMLDataType(UMLClass):
    pass


@dataclass(frozen=True)
class UMLEnumLiteral:
    id: XmiID | None
    name: UMLElementName
    type: str | None
    definition: str | None


@dataclass(frozen=True)
class UMLEnum:
    id: XmiID
    name: UMLElementName
    definition: str | None
    stereotype: str | None
    values: tuple[UMLEnumLiteral, ...] = ()


@dataclass(frozen=True)
class UMLDiagram:
    id: XmiID | None
    name: UMLElementName | None
    definition: str | None


@dataclass(frozen=True)
class UMLPackage:
    id: XmiID
    name: UMLElementName
    definition: str | None
    stereotype: str | None
    classes: tuple[UMLClass, ...] = ()
    enums: tuple[UMLEnum, ...] = ()
    data_types: tuple[UMLDataType, ...] = ()
    diagrams: tuple[UMLDiagram, ...] = ()
    packages: tuple["UMLPackage", ...] = ()


@dataclass(frozen=True)
class UMLDocument:
    name: UMLElementName | None
    packages: tuple[UMLPackage, ...] = ()
