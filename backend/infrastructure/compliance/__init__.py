from .static_lookup import StaticComplianceLookup

__all__ = ["StaticComplianceLookup"]
