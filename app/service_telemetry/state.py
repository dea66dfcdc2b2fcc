"""
Application state reported by the probes.

Holds the liveness/readiness flags and the lifecycle phase of the probe
endpoint. All access goes through a lock since probe requests are served
on the listener thread while the host signals from its own threads.
"""

import threading
from enum import Enum


class LifecyclePhase(str, Enum):
    """Lifecycle phase of the probe endpoint."""

    UNSTARTED = "unstarted"
    STARTED = "started"
    STOPPED = "stopped"  # Terminal


class ApplicationState:
    """
    Liveness/readiness flags plus lifecycle phase.

    Initial state is live, not ready, unstarted. Flags may be toggled in
    any phase; the phase only moves forward (unstarted -> started -> stopped).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._live = True
        self._ready = False
        self._phase = LifecyclePhase.UNSTARTED

    @property
    def live(self) -> bool:
        with self._lock:
            return self._live

    @property
    def ready(self) -> bool:
        with self._lock:
            return self._ready

    @property
    def phase(self) -> LifecyclePhase:
        with self._lock:
            return self._phase

    def mark_ready(self) -> None:
        with self._lock:
            self._ready = True

    def mark_not_ready(self) -> None:
        with self._lock:
            self._ready = False

    def mark_stopped(self) -> None:
        """Clear both flags. The lifecycle phase is left untouched."""
        with self._lock:
            self._live = False
            self._ready = False

    def advance(self, expected: LifecyclePhase, target: LifecyclePhase) -> bool:
        """
        Move from `expected` to `target` phase.

        Returns:
            True if the transition happened, False if the current phase
            was not `expected`
        """
        with self._lock:
            if self._phase != expected:
                return False
            self._phase = target
            return True

    def snapshot(self) -> dict:
        """Return a consistent copy of the state."""
        with self._lock:
            return {
                "live": self._live,
                "ready": self._ready,
                "phase": self._phase.value,
            }
