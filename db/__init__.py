"""
db/ - Database Layer
====================
Handles the PostgreSQL connection pool, schema initialization, the query
executor and the builder for parameterized SQL fragments.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
