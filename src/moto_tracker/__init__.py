"""
Motorcycle price tracker: scrape, normalize and reconcile.

Modules:
- normalizers: Pure field parsers and per-brand rule tables
- extractors: Source-specific extractors (table/card HTML, JSON API, rendered text)
- pipeline: Extraction orchestrator, JSON export and CLI
- reconciler: Diff incoming records against stored state, price history
- database: Store contract with SQLite and Supabase adapters
- common: Runtime config, HTTP client, page renderer
"""

__version__ = "0.1.0"
