"""Telemetry export helpers for frame and lap recording."""

from .frame_exporter import FrameExporter, MetricPoint, frame_points
from .lap_logger import LapLogger

__all__ = ["FrameExporter", "LapLogger", "MetricPoint", "frame_points"]
