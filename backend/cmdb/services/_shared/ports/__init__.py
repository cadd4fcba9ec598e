"""
cmdb.services._shared.ports
===========================

*Ports* (hexagonal interfaces) that keep the service layer independent from
concrete token implementations.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` and :class:`~.IssuedPair`, the contract for
    minting and verifying signed access/refresh tokens.

Concrete adapters live under ``cmdb.infra``.
"""

from __future__ import annotations

from .token_codec import IssuedPair, TokenCodec

__all__ = [
    "IssuedPair",
    "TokenCodec",
]
