"""Infrastructure layer — clock, SQLite ledger.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from commands or output. The ledger module bridges
persisted rows and the in-memory registry.
"""
