"""
base_overlay.py

Defines the BaseOverlay interface that all overlays must implement.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from f1_core.model import TelemetryFrame
from f1timing.core.lap_history import LapRecord


class BaseOverlay(ABC):
    """Abstract overlay interface."""

    @abstractmethod
    def widget(self):
        """Return the QWidget associated with this overlay."""
        pass

    @abstractmethod
    def on_frame_updated(self, frame: TelemetryFrame, history: Sequence[LapRecord]):
        """Handle a new frame and the matching lap-history snapshot."""
        pass

    @abstractmethod
    def on_error(self, msg: str):
        """Handle an error message."""
        pass
