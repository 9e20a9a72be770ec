"""
Built-in execution handlers, grouped by action category.

Importing this package registers every handler with the built-in dispatch
registrations (``handles`` / ``handles_category``).

MODULE MAP
──────────
1. account.py     ─ transfer, vault, stream, memo, package upgrade, access control
2. currency.py    ─ mint/burn/update, treasury cap and metadata return
3. futarchy.py    ─ DAO config, quotas, liquidity, dissolution
4. governance.py  ─ package registry and protocol admin (borrowed capabilities)
5. oracle.py      ─ price-based mint grants
"""

from intent_spine.execution.handlers import account, currency, futarchy, governance, oracle

__all__ = ["account", "currency", "futarchy", "governance", "oracle"]
