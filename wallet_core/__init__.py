"""
Wallet Core

An in-memory account directory with a toy token-balance ledger:
registration, sign-in, identity verification, password recovery and
peer-to-peer token transfers. Balances use Decimal, every state change
is written to a hash-chained audit trail.
"""

from .directory import AccountDirectory
from .responses import JSONResponse, ResponseStatus

__version__ = "1.0.0"

__all__ = ["AccountDirectory", "JSONResponse", "ResponseStatus", "__version__"]
