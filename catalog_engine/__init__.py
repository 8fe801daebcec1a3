"""
Content Catalog Engine.

Validates independently authored topic records, admits them to an ordered
registry, indexes and audits them, and exports a versioned snapshot.
"""
