"""Cache-aside demo service: PostgreSQL system of record fronted by Redis."""

__version__ = "1.0.0"
