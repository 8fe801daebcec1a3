"""
Catalog build stages.

Each module is one step of the build:
- Content Loader (ingestion)
- Schema Validator (validation)
- Content Indexer (indexing)
- Link/Resource Auditor (auditing)
- Catalog Exporter (export)
"""
