"""
Playback fault recovery.

A per-session state machine turns stream faults into recovery actions, and a
controller applies those actions to the live player after the backoff delay.

State transitions:
    PLAYING → RECOVERING_NETWORK → PLAYING (recovered) or FATAL
    PLAYING → RECOVERING_MEDIA → PLAYING (recovered) or FATAL
    FATAL is terminal until the session is reset.
"""

import asyncio
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..events import VodEvents
from ..exceptions import StreamFatalError, StreamFault
from ..log_config import get_context_logger
from ..metrics import MetricLabels, MetricsCollector, NoOpMetrics, VodMetrics
from ..time_provider import RealtimeTimeProvider, TimeProvider


DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0

BUFFER_APPEND_DETAILS = frozenset({"buffer_append", "bufferappenderror"})
BUFFER_STALLED_DETAILS = frozenset({"buffer_stalled", "bufferstallederror"})


class FaultClass(str, Enum):
    """Fault classes reported by the playback pipeline."""

    NETWORK = "network"
    MEDIA = "media"
    FATAL = "fatal"


class RecoveryState(str, Enum):
    """Session states."""

    PLAYING = "playing"
    RECOVERING_NETWORK = "recovering_network"
    RECOVERING_MEDIA = "recovering_media"
    FATAL = "fatal"


class RecoveryAction(str, Enum):
    """Actions the caller applies to the player."""

    RETRY_NETWORK = "retry_network"  # resume loading
    RETRY_MEDIA = "retry_media"  # media error recovery
    IGNORE = "ignore"
    DESTROY = "destroy"
    NONE = "none"


@dataclass(frozen=True)
class FaultDescriptor:
    """
    A fault reported by the player.

    Attributes:
        fault_class: network, media or fatal
        detail: Player-specific detail such as "bufferStalledError"
    """

    fault_class: FaultClass
    detail: str = ""

    @property
    def media_kind(self) -> str:
        """buffer_append, buffer_stalled or other."""
        normalized = self.detail.strip().lower()
        if normalized in BUFFER_APPEND_DETAILS:
            return "buffer_append"
        if normalized in BUFFER_STALLED_DETAILS:
            return "buffer_stalled"
        return "other"

    @classmethod
    def from_hls(
        cls, error_type: str, details: str = "", fatal: bool = False
    ) -> "FaultDescriptor | None":
        """
        Map an hls.js style error event to a fault.

        Network and media errors keep their class; any other error type is a
        fatal fault when flagged fatal and is ignored (None) otherwise.
        """
        if error_type == "networkError":
            return cls(FaultClass.NETWORK, details)
        if error_type == "mediaError":
            return cls(FaultClass.MEDIA, details)
        if fatal:
            return cls(FaultClass.FATAL, details)
        return None


@dataclass(frozen=True)
class RecoveryDecision:
    """
    Output of the state machine for one fault.

    Attributes:
        action: What the caller should do
        state: Session state after the fault
        retry_count: Retries used so far for the fault's class
        backoff: Seconds the caller waits before applying a retry action
        error: Fault description; a StreamFatalError when the session is fatal
    """

    action: RecoveryAction
    state: RecoveryState
    retry_count: int = 0
    backoff: float = 0.0
    error: StreamFault | None = None

    @property
    def should_retry(self) -> bool:
        return self.action in (RecoveryAction.RETRY_NETWORK, RecoveryAction.RETRY_MEDIA)


@dataclass
class RecoverySession:
    """Mutable state of one playback session."""

    session_id: str = field(default_factory=lambda: secrets.token_hex(6))
    state: RecoveryState = RecoveryState.PLAYING
    retries: dict[FaultClass, int] = field(
        default_factory=lambda: {FaultClass.NETWORK: 0, FaultClass.MEDIA: 0}
    )
    playback_started: bool = False
    stall_count: int = 0


def backoff_delay(attempt: int, base: float = DEFAULT_BACKOFF_BASE) -> float:
    """
    Delay before retry number ``attempt`` (0-based): base, 2×base, 4×base, ...

    Examples:
        >>> [backoff_delay(i) for i in range(3)]
        [1.0, 2.0, 4.0]
    """
    return base * (2 ** attempt)


class RecoveryStateMachine:
    """
    Fault → action state machine for one playback session.

    Retry counters are kept per fault class and only reset with ``reset()``
    when a new session or episode starts. The machine never sleeps; the
    backoff in each decision is applied by the caller.

    Examples:
        >>> machine = RecoveryStateMachine()
        >>> decision = machine.handle(FaultDescriptor(FaultClass.NETWORK))
        >>> decision.action, decision.backoff
        (<RecoveryAction.RETRY_NETWORK: 'retry_network'>, 1.0)
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        metrics: MetricsCollector | None = None,
    ):
        self.logger = get_context_logger("recovery_state_machine")
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.metrics = metrics or NoOpMetrics()
        self.session = RecoverySession()

    @property
    def state(self) -> RecoveryState:
        return self.session.state

    @property
    def is_fatal(self) -> bool:
        return self.session.state is RecoveryState.FATAL

    def retry_count(self, fault_class: FaultClass) -> int:
        return self.session.retries.get(fault_class, 0)

    def handle(self, fault: FaultDescriptor) -> RecoveryDecision:
        """
        Decide the recovery action for a fault and update the session state.

        Args:
            fault: Reported fault

        Returns:
            RecoveryDecision: Action, new state and backoff
        """
        decision = self._decide(fault)
        self.session.state = decision.state

        self.metrics.increment(
            VodMetrics.RECOVERY_FAULTS,
            labels={
                MetricLabels.FAULT_CLASS: fault.fault_class.value,
                MetricLabels.ACTION: decision.action.value,
            },
        )
        self.logger.info(
            VodEvents.RECOVERY_FAULT,
            session_id=self.session.session_id,
            fault_class=fault.fault_class.value,
            detail=fault.detail,
            action=decision.action.value,
            state=decision.state.value,
            retry_count=decision.retry_count,
            backoff=decision.backoff,
        )
        return decision

    def _decide(self, fault: FaultDescriptor) -> RecoveryDecision:
        session = self.session

        if session.state is RecoveryState.FATAL:
            return RecoveryDecision(RecoveryAction.NONE, RecoveryState.FATAL)

        if fault.fault_class is FaultClass.FATAL:
            return self._fatal(fault, RecoveryAction.DESTROY, "fatal stream error")

        if fault.fault_class is FaultClass.NETWORK:
            return self._retry_or_fatal(
                fault, RecoveryAction.RETRY_NETWORK, RecoveryState.RECOVERING_NETWORK
            )

        media_kind = fault.media_kind
        media_retries = session.retries[FaultClass.MEDIA]

        if (
            media_kind == "buffer_append"
            and session.playback_started
            and media_retries < self.max_retries
        ):
            return RecoveryDecision(
                RecoveryAction.IGNORE,
                session.state,
                retry_count=media_retries,
                error=self._fault(fault, "buffer append error"),
            )

        if media_kind == "buffer_stalled":
            session.stall_count += 1
            return RecoveryDecision(
                RecoveryAction.RETRY_NETWORK,
                RecoveryState.RECOVERING_NETWORK,
                retry_count=session.retries[FaultClass.NETWORK],
                error=self._fault(fault, "buffer stalled"),
            )

        return self._retry_or_fatal(
            fault, RecoveryAction.RETRY_MEDIA, RecoveryState.RECOVERING_MEDIA
        )

    def _retry_or_fatal(
        self,
        fault: FaultDescriptor,
        action: RecoveryAction,
        state: RecoveryState,
    ) -> RecoveryDecision:
        used = self.session.retries[fault.fault_class]
        if used >= self.max_retries:
            return self._fatal(
                fault,
                RecoveryAction.NONE,
                f"{fault.fault_class.value} error persisted after {used} retries",
            )

        self.session.retries[fault.fault_class] = used + 1
        return RecoveryDecision(
            action,
            state,
            retry_count=used + 1,
            backoff=backoff_delay(used, self.backoff_base),
            error=self._fault(fault, f"{fault.fault_class.value} error"),
        )

    def _fatal(
        self, fault: FaultDescriptor, action: RecoveryAction, message: str
    ) -> RecoveryDecision:
        self.metrics.increment(
            VodMetrics.RECOVERY_FATAL,
            labels={MetricLabels.FAULT_CLASS: fault.fault_class.value},
        )
        self.logger.warning(
            VodEvents.RECOVERY_FATAL,
            session_id=self.session.session_id,
            fault_class=fault.fault_class.value,
            detail=fault.detail,
        )
        return RecoveryDecision(
            action,
            RecoveryState.FATAL,
            retry_count=self.session.retries.get(fault.fault_class, 0),
            error=StreamFatalError(
                message,
                fault_class=fault.fault_class.value,
                detail=fault.detail or None,
                suggest_switch=True,
            ),
        )

    @staticmethod
    def _fault(fault: FaultDescriptor, message: str) -> StreamFault:
        return StreamFault(
            message, fault_class=fault.fault_class.value, detail=fault.detail or None
        )

    def mark_started(self) -> None:
        """Record that playback has produced frames."""
        self.session.playback_started = True

    def mark_recovered(self) -> None:
        """Return a recovering session to PLAYING. No-op when FATAL."""
        if self.session.state in (
            RecoveryState.RECOVERING_NETWORK,
            RecoveryState.RECOVERING_MEDIA,
        ):
            self.session.state = RecoveryState.PLAYING
            self.session.playback_started = True
            self.logger.info(
                VodEvents.RECOVERY_RECOVERED, session_id=self.session.session_id
            )

    def reset(self) -> None:
        """Start a new session: PLAYING with zeroed retry counters."""
        previous = self.session.session_id
        self.session = RecoverySession()
        self.logger.debug(
            VodEvents.RECOVERY_RESET,
            previous_session_id=previous,
            session_id=self.session.session_id,
        )


class PlayerHandle(Protocol):
    """The live player operations recovery needs."""

    def start_load(self) -> None: ...

    def recover_media_error(self) -> None: ...

    def destroy(self) -> None: ...


class PlaybackRecoveryController:
    """
    Applies recovery decisions to a player.

    Retry actions run after their backoff in a background task; only one
    retry is pending at a time. ``reset()`` and ``destroy()`` cancel the
    pending retry.

    Examples:
        >>> controller = PlaybackRecoveryController(player)
        >>> await controller.handle_fault(FaultDescriptor(FaultClass.NETWORK))
        >>> # player.start_load() runs after 1 s
    """

    def __init__(
        self,
        player: PlayerHandle,
        state_machine: RecoveryStateMachine | None = None,
        time_provider: TimeProvider | None = None,
    ):
        self.logger = get_context_logger("playback_recovery")
        self.player = player
        self.state_machine = state_machine or RecoveryStateMachine()
        self.time_provider = time_provider or RealtimeTimeProvider()
        self._pending: asyncio.Task | None = None

    @classmethod
    def from_settings(
        cls, player: PlayerHandle, settings=None, metrics: MetricsCollector | None = None
    ) -> "PlaybackRecoveryController":
        if settings is None:
            from ..settings import get_settings

            settings = get_settings()
        return cls(
            player,
            RecoveryStateMachine(
                max_retries=settings.recovery.max_retries,
                backoff_base=settings.recovery.backoff_base,
                metrics=metrics,
            ),
        )

    @property
    def has_pending_retry(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def handle_fault(self, fault: FaultDescriptor) -> RecoveryDecision:
        """
        Feed a fault to the state machine and act on the decision.

        Returns:
            RecoveryDecision: The decision taken

        Raises:
            StreamFatalError: When this fault makes the session fatal
        """
        was_fatal = self.state_machine.is_fatal
        decision = self.state_machine.handle(fault)

        if decision.should_retry:
            self._cancel_pending()
            self._pending = asyncio.create_task(self._retry_after(decision))
            self.logger.debug(
                VodEvents.RECOVERY_RETRY_SCHEDULED,
                action=decision.action.value,
                backoff=decision.backoff,
            )
            return decision

        if decision.state is RecoveryState.FATAL and not was_fatal:
            self._cancel_pending()
            if decision.action is RecoveryAction.DESTROY:
                self.player.destroy()
            raise decision.error

        return decision

    async def handle_hls_error(
        self, error_type: str, details: str = "", fatal: bool = False
    ) -> RecoveryDecision:
        fault = FaultDescriptor.from_hls(error_type, details, fatal)
        if fault is None:
            return RecoveryDecision(RecoveryAction.NONE, self.state_machine.state)
        return await self.handle_fault(fault)

    async def _retry_after(self, decision: RecoveryDecision) -> None:
        await self.time_provider.sleep(decision.backoff)
        if decision.action is RecoveryAction.RETRY_NETWORK:
            self.player.start_load()
        else:
            self.player.recover_media_error()

    async def wait_pending(self) -> None:
        """Wait for the pending retry, if any, to be applied."""
        if self._pending is not None:
            await self._pending

    def mark_started(self) -> None:
        self.state_machine.mark_started()

    def mark_recovered(self) -> None:
        self.state_machine.mark_recovered()

    def reset(self) -> None:
        """Cancel the pending retry and start a new session (new stream or episode)."""
        self._cancel_pending()
        self.state_machine.reset()

    def destroy(self) -> None:
        """Cancel the pending retry and tear down the player."""
        self._cancel_pending()
        self.player.destroy()

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None


__all__ = [
    "FaultClass",
    "RecoveryState",
    "RecoveryAction",
    "FaultDescriptor",
    "RecoveryDecision",
    "RecoverySession",
    "RecoveryStateMachine",
    "PlayerHandle",
    "PlaybackRecoveryController",
    "backoff_delay",
]
