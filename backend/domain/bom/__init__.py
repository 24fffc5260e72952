"""
BOM Domain - 7-level Bill of Materials.

The tree runs from the finished unit (L1) down through modules,
sub-modules, families and groups (L2-L5) to the parts:
- L6 primary parts, the parts specified for production
- L7 substitute parts, at most one approved alternate per primary
"""
