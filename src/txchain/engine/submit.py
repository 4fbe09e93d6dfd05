"""Script submission pipeline against a workspace ledger."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from ..builder import OperationCatalog, Transaction, TransactionBuilder
from ..config import ConfigBundle, load_config_bundle
from ..executor import ExecutionResult, Ledger, LocalExecutor, StoredObject
from ..script import build_transaction
from .errors import SubmitError


def build_script(script_path: Path, config_dir: Path) -> Tuple[Transaction, ConfigBundle]:
    """Compile the script at *script_path* using the operations in *config_dir*."""

    script_path = Path(script_path)
    config = load_config_bundle(config_dir)
    try:
        text = script_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SubmitError(f"cannot read script {script_path}: {exc}") from exc
    transaction = build_transaction(
        text,
        OperationCatalog.from_config(config),
        builder=TransactionBuilder.from_config(config),
    )
    return transaction, config


def submit_script(
    script_path: Path,
    config_dir: Path,
    workspace: Path,
    *,
    sender: str,
) -> ExecutionResult:
    """Build a script and submit it to the workspace's reference executor."""

    workspace = Path(workspace)
    if not (workspace / "objects.json").exists():
        raise SubmitError(f"workspace {workspace} is not initialized")
    transaction, config = build_script(script_path, config_dir)
    executor = LocalExecutor.from_config(config, Ledger(workspace))
    return executor.submit(transaction, sender=sender)


def init_workspace(config_dir: Path, workspace: Path) -> int:
    """Seed *workspace* with the genesis objects from *config_dir*."""

    config = load_config_bundle(config_dir)
    if config.genesis is None:
        raise SubmitError(f"no genesis.toml in {config_dir}")
    ledger = Ledger(workspace)
    if ledger.objects:
        raise SubmitError(f"workspace {workspace} already holds objects")
    ledger.seed(
        StoredObject(
            object_id=entry.id,
            type=entry.type,
            version=entry.version,
            owner=entry.owner,
            fields=dict(entry.fields),
        )
        for entry in config.genesis.objects
    )
    return len(ledger.objects)
