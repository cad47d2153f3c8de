"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for a specific domain entity.
Repositories are built around an injected query executor and return rows
as dicts keyed by application field names.
"""
