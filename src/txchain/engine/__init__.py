"""Workflow orchestration on top of the builder and executor."""

from .errors import SubmitError
from .flow import (
    FlowResult,
    MintResult,
    build_flag_transaction,
    mint_resources,
    run_flag_flow,
)
from .submit import build_script, init_workspace, submit_script

__all__ = [
    "SubmitError",
    "MintResult",
    "FlowResult",
    "mint_resources",
    "build_flag_transaction",
    "run_flag_flow",
    "build_script",
    "submit_script",
    "init_workspace",
]
