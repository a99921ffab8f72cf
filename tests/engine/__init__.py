"""
Job Engine Test Suite.

- Entities and status transitions
- Stores (in-memory, SQLite)
- Handlers and the handler registry
- Spawners
- JobService: enqueue dedup, attempt loop, queries, concurrency
"""
