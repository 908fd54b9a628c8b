from __future__ import annotations

"""
SIRE report generator
--------------------
This module generates a DOCX report from one or more AnalysisResult objects
(usually the health and economic rankings).

Design goals:
- Keep SIRE usable even if report dependencies are missing (lazy imports).
- One section per analysis: a chart of the worst event types' ranks and a
  table with the numbers behind it.
- Say plainly how ranks were computed, so the report can be reproduced.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import io
import os

from .engine import AnalysisResult


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Bulk CSV export (1950-2011) of the NOAA storm database."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "SIRE Impact Ranking Report"
    subtitle: str = "Storm Impact Ranking Engine"
    dataset_name: str = "NOAA Storm Database export"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # Optional: list of CLI commands used to create the results
    command_log: Optional[List[str]] = None


def _label(score_name: str) -> str:
    """'property_damage_mean_score' -> 'Property damage mean'."""
    base = score_name[:-len("_score")] if score_name.endswith("_score") else score_name
    return base.replace("_", " ").capitalize()


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    results: Sequence[AnalysisResult],
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for a list of analysis results.

    IMPORTANT:
    - This does NOT modify the dataset file.
    - Charts are rendered to in-memory PNGs and embedded in the DOCX.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not results:
        raise ValueError("No analysis results to report on (run an analysis first).")

    # -----------------------------
    # 1) Create charts
    # -----------------------------
    # analysis name -> (title, PNG bytes)
    charts: Dict[str, Tuple[str, bytes]] = {}

    for res in results:
        if not res.top:
            continue
        labels = [r.category for r in res.top]
        score_names = list(res.top[0].scores)
        x = np.arange(len(labels))
        width = 0.8 / len(score_names)

        plt.figure()
        for k, s in enumerate(score_names):
            plt.bar(x + k * width, [r.scores[s] for r in res.top], width, label=_label(s))
        plt.xticks(x + width * (len(score_names) - 1) / 2, labels, rotation=45, ha="right")
        title = f"Worst {len(labels)} event types: {res.analysis.name} ranks (1 = worst)"
        plt.title(title)
        plt.ylabel("Rank")
        plt.legend()
        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=200)
        plt.close()
        charts[res.analysis.name] = (title, buf.getvalue())

    # -----------------------------
    # 2) Build DOCX report
    # -----------------------------
    doc = Document()

    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Analyses", ", ".join(res.analysis.name for res in results))

    doc.add_paragraph("")
    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    if cit.file_note:
        doc.add_paragraph(f"File note: {cit.file_note}")
    doc.add_paragraph(
        f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}."
    )

    if config.command_log:
        doc.add_paragraph("")
        doc.add_heading("Command log (reproducibility)", level=1)
        doc.add_paragraph("These SIRE commands produced the results below:")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    # One section per analysis
    for res in results:
        a = res.analysis
        doc.add_paragraph("")
        doc.add_heading(f"{a.name.capitalize()} impact", level=1)
        _kv("Metrics", ", ".join(m.name for m in a.metrics))
        _kv("Minimum events per type", str(a.min_count))
        _kv("Event types (all / ranked)", f"{len(res.aggregated)} / {len(res.filtered)}")

        if not res.top:
            doc.add_paragraph("No event type reached the minimum number of events.")
            continue

        if a.name in charts:
            title, png = charts[a.name]
            doc.add_paragraph(title)
            doc.add_picture(io.BytesIO(png), width=Inches(6.5))

        score_names = list(res.top[0].scores)
        t = doc.add_table(rows=1, cols=3 + len(score_names))
        h = t.rows[0].cells
        h[0].text = "Event type"
        h[1].text = "Events"
        for k, s in enumerate(score_names):
            h[2 + k].text = _label(s) + " rank"
        h[-1].text = "Composite"
        for r in res.top:
            cells = t.add_row().cells
            cells[0].text = r.category
            cells[1].text = str(r.count)
            for k, s in enumerate(score_names):
                cells[2 + k].text = str(r.scores[s])
            cells[-1].text = str(r.composite_score)

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_paragraph("")
    doc.add_heading("Reproducibility footer", level=1)

    from . import __version__ as sire_version
    from datetime import datetime as _dt
    generated_at = _dt.now().isoformat(timespec="seconds")

    doc.add_paragraph(f"SIRE version: {sire_version}")
    doc.add_paragraph(f"Report generated at: {generated_at}")
    if cit.file_name:
        doc.add_paragraph(f"Dataset file: {cit.file_name}")

    doc.add_paragraph("Ranking rules:")
    for note in [
        "Damage is base value x 10^exponent (H=2, K=3, M=6, B=9, digit=itself, anything else=0).",
        "Event types with fewer events than the minimum are dropped before ranking.",
        "Each metric is ranked largest-first; equal values share the first position they occupy.",
        "The composite score is the sum of the metric ranks; lower means worse.",
    ]:
        doc.add_paragraph(note, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
