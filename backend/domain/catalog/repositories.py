"""
Catalog Domain - Repository Interfaces (Ports).

These are abstract interfaces the BOM operations are given as collaborators.
The actual implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import PartInfo, ProductTemplate


class PartCatalog(ABC):
    """Read-only lookup of part codes."""
    
    @abstractmethod
    def lookup(self, part_id: str) -> Optional[PartInfo]:
        """Get canonical title/cost of a part code, None if unknown."""
        pass
    
    @abstractmethod
    def parts_in_category(self, category: str) -> List[PartInfo]:
        """Get every L6/L7 part of a category, in catalog order."""
        pass


class TemplateRepository(ABC):
    """Read-only access to product templates."""
    
    @abstractmethod
    def list_templates(self) -> List[ProductTemplate]:
        """Get all templates, in catalog order."""
        pass
    
    @abstractmethod
    def get_template(self, name: str) -> Optional[ProductTemplate]:
        """Get template by product name."""
        pass
