"""
Template-backed part catalog.

Serves the product templates and derives the part catalog from their
L6/L7 nodes. A part code that appears in several templates keeps the data
of its first occurrence.
"""

from __future__ import annotations
import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domain.bom.tree import normalize, walk
from domain.catalog.entities import PartInfo, ProductTemplate
from domain.catalog.repositories import PartCatalog, TemplateRepository

from .templates import PRODUCT_TEMPLATES

logger = logging.getLogger(__name__)


class TemplateCatalog(PartCatalog, TemplateRepository):
    """In-memory catalog built from template definitions."""

    def __init__(self, definitions: Iterable[Mapping[str, Any]]):
        self._templates: Dict[str, ProductTemplate] = {}
        self._parts: Dict[str, PartInfo] = {}

        for definition in definitions:
            template = ProductTemplate(
                name=definition["name"],
                structure=normalize(definition.get("structure", [])),
                description=definition.get("description", ""),
                version=definition.get("version", ""),
                last_updated=definition.get("last_updated"),
            )
            self._templates[template.name] = template
            self._index_parts(template)

        logger.debug(
            f"Catalog loaded: {len(self._templates)} templates, {len(self._parts)} parts"
        )

    def _index_parts(self, template: ProductTemplate) -> None:
        for node in walk(template.structure):
            if node.is_part and node.part_id and node.part_id not in self._parts:
                self._parts[node.part_id] = PartInfo.from_node(node, product=template.name)

    # =========================================================================
    # PartCatalog
    # =========================================================================

    def lookup(self, part_id: str) -> Optional[PartInfo]:
        return self._parts.get(part_id)

    def parts_in_category(self, category: str) -> List[PartInfo]:
        return [info for info in self._parts.values() if info.category == category]

    # =========================================================================
    # TemplateRepository
    # =========================================================================

    def list_templates(self) -> List[ProductTemplate]:
        return list(self._templates.values())

    def get_template(self, name: str) -> Optional[ProductTemplate]:
        return self._templates.get(name)


@lru_cache(maxsize=1)
def default_catalog() -> TemplateCatalog:
    """Catalog of the built-in product templates."""
    return TemplateCatalog(PRODUCT_TEMPLATES)
