"""
Ledger Kernel - persistence and infrastructure for personal financial entries.

Provides:
- FinancialEntry domain DTO and ORM model (templates and materialized instances)
- Read-side selectors and the write-side entry store
- Typed exceptions, injectable clock, structured JSON logging
"""

__version__ = "0.1.0"
