"""
Core domain models, integer math, layout contracts and errors.

This package is independent of external systems (ledger RPC, wallets,
UI): everything here is pure data and pure functions.
"""
