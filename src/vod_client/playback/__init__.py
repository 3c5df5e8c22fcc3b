"""
Playback Recovery Package

Turns live stream faults into bounded recovery actions and applies them to
the player.

Main Components:
    - RecoveryStateMachine: Per-session fault → action rules
    - PlaybackRecoveryController: Applies actions after backoff, cancellable
    - retry_with_backoff / is_retryable_error: Request retry helpers
"""

from .recovery import (
    FaultClass,
    FaultDescriptor,
    PlaybackRecoveryController,
    PlayerHandle,
    RecoveryAction,
    RecoveryDecision,
    RecoverySession,
    RecoveryState,
    RecoveryStateMachine,
    backoff_delay,
)
from .retry import (
    RETRYABLE_STATUSES,
    ErrorType,
    is_retryable_error,
    retry_with_backoff,
    user_friendly_message,
)

__all__ = [
    "FaultClass",
    "FaultDescriptor",
    "RecoveryAction",
    "RecoveryDecision",
    "RecoverySession",
    "RecoveryState",
    "RecoveryStateMachine",
    "PlayerHandle",
    "PlaybackRecoveryController",
    "backoff_delay",
    "ErrorType",
    "RETRYABLE_STATUSES",
    "is_retryable_error",
    "retry_with_backoff",
    "user_friendly_message",
]
