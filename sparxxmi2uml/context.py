import logging
from dataclasses import dataclass, field

from sparxxmi2uml.raw_tree import RawDocumentTree
from sparxxmi2uml.uml_model import XmiID
from sparxxmi2uml.xmi_model import XmiDocument

logger = logging.getLogger(__name__)


class ReferenceCache:
    """Memoized identifier -> name lookup for a single parse.

    Looks for any node carrying the id first, then for the `model` node of a
    connector end pointing at it. Misses are cached as well.
    """

    def __init__(self, tree: RawDocumentTree) -> None:
        self.tree = tree
        self._names: dict[XmiID, str | None] = {}

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, xmi_id: XmiID) -> bool:
        return xmi_id in self._names

    def lookup(self, xmi_id: XmiID | None) -> str | None:
        if xmi_id is None:
            return None

        if xmi_id not in self._names:
            name = self.tree.name_by_id(xmi_id)
            if name is None:
                name = self.tree.connector_model_name(xmi_id)
            if name is None:
                logger.debug("No name found for %s", xmi_id)
            self._names[xmi_id] = name

        return self._names[xmi_id]


@dataclass
class ParseContext:
    """State threaded through one parse: both read-only trees and the name cache."""

    model: XmiDocument
    tree: RawDocumentTree
    cache: ReferenceCache = field(init=False)

    def __post_init__(self) -> None:
        self.cache = ReferenceCache(self.tree)

    def lookup_name(self, xmi_id: XmiID | None) -> str | None:
        return self.cache.lookup(xmi_id)
