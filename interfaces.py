"""
Abstract interfaces shared by the simulation core and its collaborators.
The engine depends on these abstractions, never on a concrete front end or
audio backend.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


class Tickable(ABC):
    """Interface for components advanced once per simulated second."""

    @abstractmethod
    def tick(self) -> None:
        """Advance the component by one tick."""
        pass


class SnapshotProvider(ABC):
    """Interface for components that expose read-only state to a viewpoint."""

    @abstractmethod
    def snapshot(self, viewpoint: str = "trainer") -> Dict[str, Any]:
        """Return a dictionary view of the current state."""
        pass

    @abstractmethod
    def log_entries(self) -> List[Dict[str, str]]:
        """Return the audit log, most recent first."""
        pass


class AudioSink(ABC):
    """
    Fire-and-forget audio collaborator.
    Implementations must never raise into the caller.
    """

    @abstractmethod
    def play(self, cue: str) -> None:
        """Play a one-shot cue (warning, critical, click)."""
        pass

    @abstractmethod
    def start_loop(self) -> None:
        """Start the evacuation siren loop."""
        pass

    @abstractmethod
    def stop_loop(self) -> None:
        """Stop the evacuation siren loop."""
        pass

    @property
    @abstractmethod
    def muted(self) -> bool:
        pass

    @abstractmethod
    def set_muted(self, muted: bool) -> None:
        pass


class SimulationClock(ABC):
    """Interface for the periodic driver of the engine's tick handler."""

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def restart(self) -> None:
        pass
