"""
Startup sanity checks (fail-fast).

Validates that the target database is reachable and exposes the row count
statistics the query cost endpoint depends on.
"""
