import logging
import os

from lxml import etree

from sparxxmi2uml.context import ParseContext
from sparxxmi2uml.raw_tree import RawDocumentTree
from sparxxmi2uml.serializer import serialize_packages
from sparxxmi2uml.uml_model import UMLDocument
from sparxxmi2uml.xmi_model import XmiDocument, XmiReadError, load_model

__all__ = [
    "XmiReadError",
    "parse",
    "parse_file",
    "parse_string",
    "read_xmi",
    "read_xmi_string",
]

logger = logging.getLogger(__name__)

XMIFilePath = os.PathLike | str


def _bind(root: etree._Element) -> tuple[XmiDocument, RawDocumentTree]:
    return load_model(root), RawDocumentTree(root)


def read_xmi(path: XMIFilePath) -> tuple[XmiDocument, RawDocumentTree]:
    """Read an XMI file into its bound model and its raw queryable tree.

    Raises:
        XmiReadError: if the file cannot be read or holds no UML model.
    """
    try:
        tree = etree.parse(os.fspath(path), etree.XMLParser(huge_tree=True))
    except (OSError, etree.XMLSyntaxError) as e:
        raise XmiReadError(f"Cannot read XMI document {path}: {e}") from e

    return _bind(tree.getroot())


def read_xmi_string(data: str | bytes) -> tuple[XmiDocument, RawDocumentTree]:
    parser = etree.XMLParser(huge_tree=True)
    if isinstance(data, str):
        # Already decoded text; the encoding declaration no longer applies.
        data = data.encode("utf-8")
        parser = etree.XMLParser(huge_tree=True, encoding="utf-8")

    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise XmiReadError(f"Cannot read XMI document: {e}") from e

    return _bind(root)


def parse(xmi_model: XmiDocument, raw_tree: RawDocumentTree) -> UMLDocument:
    """Turn an already-read XMI document into a `UMLDocument`.

    Every call gets its own context and name cache, so separate documents
    never share state.
    """
    ctx = ParseContext(model=xmi_model, tree=raw_tree)
    model = xmi_model.model

    document = UMLDocument(name=model.name, packages=serialize_packages(ctx, model))
    logger.info(
        "Parsed model %r: %d root packages, %d names resolved",
        document.name,
        len(document.packages),
        len(ctx.cache),
    )

    return document


def parse_file(path: XMIFilePath) -> UMLDocument:
    return parse(*read_xmi(path))


def parse_string(data: str | bytes) -> UMLDocument:
    return parse(*read_xmi_string(data))
