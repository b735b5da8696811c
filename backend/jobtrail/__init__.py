"""
JobTrail Backend — Package Initializer
========================================

Job application tracker with offline-first synchronization.

Layers:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns, identity gate
    ├─────────────────────────────────────┤
    │     Services (Business Logic)       │  ← sync merge, résumés, accounts
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data)          │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database / ServiceContext          │  ← engine, sessions, lifecycle
    └─────────────────────────────────────┘

The same code serves both deployment shapes: STORAGE_MODE=local (SQLite
file) and STORAGE_MODE=cloud (PostgreSQL).
"""

__version__ = "1.0.0"
