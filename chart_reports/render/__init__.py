"""Chart export: off-screen snapshots, PNG files and composed PDF pages."""

from __future__ import annotations

from .export import ExportPipeline, MountedChart, Snapshot
from .pdf import PDFExporter, compute_layout

__all__ = ["ExportPipeline", "MountedChart", "PDFExporter", "Snapshot", "compute_layout"]
