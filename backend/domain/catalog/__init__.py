"""
Catalog Domain - part lookup and product templates.

The catalog is read-only reference data for the BOM editor:
- Product templates (complete 7-level trees a new BOM starts from)
- Part information (canonical title and cost per part code)
"""
