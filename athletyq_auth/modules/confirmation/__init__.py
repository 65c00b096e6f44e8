from athletyq_auth.modules.confirmation.orchestrator import (
    ConfirmationOrchestrator, MISSING_TOKENS_MESSAGE, build_orchestrator
)
from athletyq_auth.modules.confirmation.state import ConfirmationState, ConfirmationStatus, Countdown

__all__ = [
    "ConfirmationOrchestrator",
    "ConfirmationState",
    "ConfirmationStatus",
    "Countdown",
    "MISSING_TOKENS_MESSAGE",
    "build_orchestrator",
]
