"""Typer CLI entrypoint for txchain."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .builder import (
    BuildError,
    Transaction,
    TransactionFormatError,
    compute_tx_digest,
    dumps,
    loads,
)
from .engine import SubmitError, build_script, init_workspace, submit_script
from .exceptions import ConfigError, TxchainError
from .executor import Ledger
from .logging_utils import configure_logging
from .script import ScriptParseError, ScriptSemanticError


EXIT_SUCCESS = 0
EXIT_REJECTED = 2
EXIT_SCRIPT_ERROR = 3
EXIT_IO_ERROR = 4
EXIT_CONFIG_ERROR = 5


app = typer.Typer(help="Atomic transaction builder")
tx_app = typer.Typer(help="Transaction commands")
state_app = typer.Typer(help="Workspace state commands")
app.add_typer(tx_app, name="tx")
app.add_typer(state_app, name="state")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Base command callback for shared options."""

    if verbose:
        configure_logging(level=logging.DEBUG, force=True)


def _summarize(transaction: Transaction) -> dict:
    return {
        "digest": compute_tx_digest(transaction),
        "inputs": len(transaction.inputs),
        "commands": [
            command.operation.display() for command in transaction.commands
        ],
        "warnings": [
            {"code": issue.code, "message": issue.message, "location": issue.location}
            for issue in transaction.issues
        ],
    }


def _fail(label: str, exc: Exception, code: int) -> typer.Exit:
    typer.echo(f"{label}: {exc}", err=True)
    return typer.Exit(code)


@tx_app.command("build")
def tx_build(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    config_dir: Path = typer.Option(
        Path("config"),
        "--config",
        "-c",
        help="Path to configuration directory",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        dir_okay=False,
        writable=True,
        help="Optional path for the serialized transaction JSON",
    ),
) -> None:
    """Compile a script into a finalized transaction."""

    try:
        transaction, _ = build_script(script, config_dir)
    except ConfigError as exc:
        raise _fail("Config error", exc, EXIT_CONFIG_ERROR) from exc
    except (ScriptParseError, ScriptSemanticError, BuildError) as exc:
        raise _fail("Script error", exc, EXIT_SCRIPT_ERROR) from exc
    except TxchainError as exc:
        raise _fail("Error", exc, EXIT_IO_ERROR) from exc

    if out is not None:
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(dumps(transaction, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise _fail(f"Failed to write {out}", exc, EXIT_IO_ERROR) from exc

    typer.echo(json.dumps(_summarize(transaction), indent=2))


@tx_app.command("show")
def tx_show(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
) -> None:
    """Validate a serialized transaction and print its summary."""

    try:
        transaction = loads(path.read_text(encoding="utf-8"))
    except TransactionFormatError as exc:
        raise _fail("Transaction error", exc, EXIT_SCRIPT_ERROR) from exc
    except OSError as exc:
        raise _fail(f"Failed to read {path}", exc, EXIT_IO_ERROR) from exc

    typer.echo(json.dumps(_summarize(transaction), indent=2))


@tx_app.command("submit")
def tx_submit(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    sender: str = typer.Option(..., "--sender", "-s", help="Sender address"),
    config_dir: Path = typer.Option(
        Path("config"),
        "--config",
        "-c",
        help="Path to configuration directory",
    ),
    workspace: Path = typer.Option(
        Path(".txchain"),
        "--workspace",
        "-w",
        help="Directory for ledger state",
    ),
) -> None:
    """Build a script and submit it to the workspace executor."""

    try:
        result = submit_script(script, config_dir, workspace, sender=sender)
    except ConfigError as exc:
        raise _fail("Config error", exc, EXIT_CONFIG_ERROR) from exc
    except (ScriptParseError, ScriptSemanticError, BuildError) as exc:
        raise _fail("Script error", exc, EXIT_SCRIPT_ERROR) from exc
    except SubmitError as exc:
        raise _fail("Submit error", exc, EXIT_IO_ERROR) from exc
    except TxchainError as exc:
        raise _fail("Error", exc, EXIT_IO_ERROR) from exc

    typer.echo(json.dumps(result.as_dict(), indent=2, sort_keys=True))
    if not result.ok:
        raise typer.Exit(EXIT_REJECTED)


@state_app.command("init")
def state_init(
    config_dir: Path = typer.Option(
        Path("config"),
        "--config",
        "-c",
        help="Path to configuration directory",
    ),
    workspace: Path = typer.Option(
        Path(".txchain"),
        "--workspace",
        "-w",
        help="Directory for ledger state",
    ),
) -> None:
    """Seed a workspace with genesis objects."""

    try:
        count = init_workspace(config_dir, workspace)
    except ConfigError as exc:
        raise _fail("Config error", exc, EXIT_CONFIG_ERROR) from exc
    except SubmitError as exc:
        raise _fail("Init error", exc, EXIT_IO_ERROR) from exc

    typer.echo(json.dumps({"workspace": str(workspace), "objects": count}, indent=2))


@state_app.command("objects")
def state_objects(
    workspace: Path = typer.Option(
        Path(".txchain"),
        "--workspace",
        "-w",
        help="Directory for ledger state",
    ),
    object_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only list objects of this type"
    ),
    table: bool = typer.Option(False, "--table", help="Print the tabular view instead of JSON"),
) -> None:
    """List objects held in the workspace."""

    ledger = Ledger(workspace)
    if table:
        df = ledger.read_objects_view()
        if object_type is not None:
            df = df[df["type"] == object_type]
        typer.echo(df.to_string(index=False))
        return

    objects = [
        ledger.objects[key].as_dict()
        for key in sorted(ledger.objects)
        if object_type is None or ledger.objects[key].type == object_type
    ]
    payload = {"seq": ledger.seq, "objects": objects}
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
