"""
Utility modules for the catalog engine.

Cross-cutting concerns:
- Storage: YAML/JSON/CSV file I/O
- Tokenizer: Search tokens for indexing and queries
"""
