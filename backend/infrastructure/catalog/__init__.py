"""
Catalog infrastructure - in-memory product templates and part lookup.
"""

from .template_catalog import TemplateCatalog, default_catalog

__all__ = ["TemplateCatalog", "default_catalog"]
