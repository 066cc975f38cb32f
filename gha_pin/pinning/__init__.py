from .engine import RewriteDecision, apply_decisions, build_decision, needs_rewrite
from .pinner import CancellationToken, PinResult, pin_workflow

__all__ = [
    "RewriteDecision",
    "apply_decisions",
    "build_decision",
    "needs_rewrite",
    "CancellationToken",
    "PinResult",
    "pin_workflow",
]
