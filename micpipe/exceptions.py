"""Typed exceptions for micpipe.

Hierarchy:
    MicpipeError (base)
    +-- PipelineError
        +-- PipelineClosedError
        +-- OwnershipError
        +-- EffectFanOutError

Stages never raise for well-formed audio; these cover misuse of the
pipeline object and failures of pluggable stages during fan-out.
"""

from __future__ import annotations


class MicpipeError(Exception):
    """Base for all micpipe exceptions."""


# --- Pipeline ---


class PipelineError(MicpipeError):
    """Pipeline-related error."""


class PipelineClosedError(PipelineError):
    """Pipeline was used after release()."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: pipeline has been released")


class OwnershipError(PipelineError):
    """Pipeline was called from a thread other than its owner."""

    def __init__(self, operation: str, owner: str, caller: str) -> None:
        self.operation = operation
        self.owner = owner
        self.caller = caller
        super().__init__(
            f"Cannot {operation} from thread '{caller}': pipeline is owned by thread '{owner}'"
        )


class EffectFanOutError(PipelineError):
    """One or more stages failed while reset/release was fanned out.

    Raised only after every stage has been visited.
    """

    def __init__(self, operation: str, failures: list[tuple[str, BaseException]]) -> None:
        self.operation = operation
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{operation} failed for stage(s): {names}")
