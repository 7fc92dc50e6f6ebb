"""In-memory player sessions with per-player serialization."""
import asyncio
import logging
import time
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from fruitmachine.config import settings
from fruitmachine.config_hash import get_config_hash
from fruitmachine.logic.models import MachineConfig
from fruitmachine.logic.presets import configured_machine
from fruitmachine.logic.rng import RNGBase
from fruitmachine.logic.session import SlotSession
from fruitmachine.telemetry import TelemetryService, telemetry_service


logger = logging.getLogger(__name__)


@dataclass
class LockMetrics:
    """Metrics from lock acquisition."""

    acquire_ms: float


class SessionStore:
    """
    One SlotSession per player, kept in process memory.

    Every transition of a player's session runs inside player_session(),
    which serializes them behind a per-player asyncio.Lock. Nothing is
    persisted; a restart starts every player from the configured credits.
    """

    def __init__(
        self,
        config: MachineConfig | None = None,
        max_sessions: int | None = None,
        telemetry: TelemetryService | None = None,
    ):
        self._config = config
        self._max_sessions = max_sessions or settings.max_sessions
        self._telemetry = telemetry or telemetry_service
        self._sessions: OrderedDict[str, SlotSession] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        # Injected by tests to make new sessions deterministic
        self.rng_factory: Callable[[], RNGBase] | None = None

    @property
    def config(self) -> MachineConfig:
        """Machine configuration, loaded from settings on first use."""
        if self._config is None:
            self._config = configured_machine(settings)
            logger.info(
                "Loaded machine %r (config_hash=%s)",
                self._config.name,
                get_config_hash(self._config),
            )
        return self._config

    def set_config(self, config: MachineConfig) -> None:
        """Replace the machine configuration and drop every session."""
        self._config = config
        self.reset()

    def reset(self) -> None:
        self._sessions.clear()
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, player_id: str) -> SlotSession | None:
        return self._sessions.get(player_id)

    def get_or_create(self, player_id: str) -> SlotSession:
        """Return the player's session, creating it on first access."""
        session = self._sessions.get(player_id)
        if session is not None:
            self._sessions.move_to_end(player_id)
            return session

        config = self.config
        rng = self.rng_factory() if self.rng_factory is not None else None
        session = SlotSession(config, rng=rng)
        session.subscribe(
            self._telemetry.session_listener(player_id, get_config_hash(config))
        )
        self._sessions[player_id] = session
        logger.debug("Created session for player %s", player_id)
        self._evict()
        return session

    def _evict(self) -> None:
        """Drop least recently used idle sessions above max_sessions."""
        for player_id in list(self._sessions):
            if len(self._sessions) <= self._max_sessions:
                break
            lock = self._locks.get(player_id)
            if lock is not None and lock.locked():
                continue
            del self._sessions[player_id]
            self._locks.pop(player_id, None)
            logger.info("Evicted session for player %s", player_id)

    @asynccontextmanager
    async def player_session(
        self, player_id: str
    ) -> AsyncIterator[tuple[SlotSession, LockMetrics]]:
        """
        Serialize access to a player's session.

        Usage:
            async with store.player_session(player_id) as (session, metrics):
                session.request_spin()
        """
        lock = self._locks.setdefault(player_id, asyncio.Lock())
        start = time.monotonic()
        async with lock:
            metrics = LockMetrics(acquire_ms=(time.monotonic() - start) * 1000)
            yield self.get_or_create(player_id), metrics


# Global instance
session_store = SessionStore()
