"""Interactive rendering of the backing-file layout using Plotly."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import plotly.express as px

from seqstore.index import Interval
from seqstore.logging_utils import get_logger

LOGGER = get_logger(__name__)


def _to_plot_rows(intervals: Iterable[Interval]) -> List[dict]:
    rows: List[dict] = []
    start = 0
    for interval in intervals:
        rows.append(
            {
                "run": f"{interval.start_id:#06x}..{interval.end_id:#06x}",
                "start_offset": start,
                "end_offset": interval.end_offset,
                "bytes": interval.end_offset - start,
                "identifiers": interval.end_id - interval.start_id + 1,
            }
        )
        start = interval.end_offset
    return rows


def render_layout(intervals: Iterable[Interval], output_dir: str | Path) -> Path:
    """Render each identifier run as a bar over its byte range."""

    rows = _to_plot_rows(intervals)

    target_dir = Path(output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    output_path = target_dir / "layout.html"

    if not rows:
        html = """
        <!DOCTYPE html>
        <html lang=\"en\">
        <head><meta charset=\"utf-8\"><title>seqstore layout</title></head>
        <body><h1>seqstore layout</h1><p>No payloads stored.</p></body>
        </html>
        """
        output_path.write_text(html, encoding="utf-8")
        LOGGER.info("Index is empty; wrote placeholder layout to %s", output_path)
        return output_path

    fig = px.bar(
        rows,
        x="bytes",
        y="run",
        base="start_offset",
        orientation="h",
        hover_data={
            "run": True,
            "start_offset": True,
            "end_offset": True,
            "bytes": True,
            "identifiers": True,
        },
        labels={"bytes": "Byte offset", "run": "Identifier run"},
        title="seqstore backing-file layout",
    )

    fig.update_layout(yaxis={"autorange": "reversed"}, hovermode="closest")

    fig.write_html(output_path, include_plotlyjs="cdn", full_html=True)
    LOGGER.info("Wrote layout with %s runs to %s", len(rows), output_path)

    return output_path


__all__ = ["render_layout"]
