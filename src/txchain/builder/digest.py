"""Deterministic transaction digests."""

from __future__ import annotations

import hashlib

from .models import Transaction
from .serialization import dumps


def compute_tx_digest(transaction: Transaction) -> str:
    """Compute the SHA256 digest of the canonical JSON form of *transaction*."""

    return hashlib.sha256(dumps(transaction).encode("utf-8")).hexdigest()
