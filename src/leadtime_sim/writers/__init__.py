"""Writers module for exporting run results."""

from leadtime_sim.writers.base import BaseWriter
from leadtime_sim.writers.report_writer import ReportWriter

__all__ = ["BaseWriter", "ReportWriter"]
