from __future__ import annotations

from typing import Any

from runner.types import StepResult


def check(name: str, ok: bool, **detail: Any) -> StepResult:
    """Record one expectation."""
    return StepResult(name=name, ok=bool(ok), detail=detail)


def missing_id_for(created_id: int) -> int:
    """An id well past anything the run created."""
    return max(9999, created_id + 10_000)


def summarize(steps: list[StepResult]) -> tuple[dict, int]:
    """Compute summary dict and an exit code from the recorded checks."""
    failed = [s for s in steps if not s.ok]
    summary = {
        "component": "runner",
        "event": "summary",
        "checks": len(steps),
        "passed": len(steps) - len(failed),
        "failed": len(failed),
        "failures": [{"check": s.name, **s.detail} for s in failed],
    }
    exit_code = 0 if (steps and not failed) else 1
    return summary, exit_code
