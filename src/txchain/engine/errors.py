"""Engine-level errors."""

from __future__ import annotations

from ..exceptions import TxchainError


class SubmitError(TxchainError):
    pass
