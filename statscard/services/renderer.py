"""SVG card rendering"""

from __future__ import annotations

from html import escape

from statscard.fetchers.contracts import MetricsSnapshot

WIDTH = 450
HEIGHT = 180
PADDING = 20
TITLE_HEIGHT = 30
ROW_HEIGHT = 25
TITLE_BASELINE = 20
ROW_BASELINE = 17.5
VALUE_INSET = 50

TITLE = "Combined GitHub Stats"

TEXT_COLOR = "#c9d1d9"
ICON_COLOR = "#58a6ff"
BG_COLOR = "#0d1117"
BORDER_COLOR = "#30363d"


def _num(value: float) -> str:
    """Coordinates without a trailing ``.0``."""
    return f"{value:g}"


def row_positions(row_count: int = 5) -> tuple[float, list[float]]:
    """Title baseline and row baselines, vertically centered in the canvas."""
    content_height = TITLE_HEIGHT + row_count * ROW_HEIGHT
    top_margin = (HEIGHT - content_height) / 2
    title_y = top_margin + TITLE_BASELINE
    rows = [top_margin + TITLE_HEIGHT + index * ROW_HEIGHT + ROW_BASELINE for index in range(row_count)]
    return title_y, rows


def _row(label: str, value: int, y: float, icon: str) -> str:
    return (
        f'<g transform="translate({PADDING}, {_num(y)})">'
        f'<text x="0" y="0" fill="{ICON_COLOR}" font-size="14">{icon}</text>'
        f'<text x="25" y="0" fill="{TEXT_COLOR}" font-size="14" font-weight="bold">{escape(label)}:</text>'
        f'<text x="{WIDTH - PADDING - VALUE_INSET}" y="0" fill="{TEXT_COLOR}" font-size="14" '
        f'text-anchor="end">{int(value)}</text>'
        "</g>"
    )


def render_card(snapshot: MetricsSnapshot, commits_label: str) -> str:
    """
    Render the stats card

    Args:
        snapshot: Reconciled metrics
        commits_label: Window shown next to the commit count, e.g. "2026"

    Returns:
        SVG document as a string
    """
    rows = [
        ("Total Stars", snapshot.total_stars, "⭐"),
        (f"Total Commits ({commits_label})", snapshot.total_commits, "📊"),
        ("Total PRs", snapshot.total_prs, "✅"),
        ("Total Issues", snapshot.total_issues, "❗"),
        ("Contributed to", snapshot.total_contributed_to, "🤝"),
    ]
    title_y, row_ys = row_positions(len(rows))
    body = "\n".join(
        f"  {_row(label, value, y, icon)}" for (label, value, icon), y in zip(rows, row_ys)
    )

    return (
        f'<svg width="{WIDTH}" height="{HEIGHT}" viewBox="0 0 {WIDTH} {HEIGHT}" fill="none" '
        f'xmlns="http://www.w3.org/2000/svg" role="img" aria-label="{TITLE}">\n'
        f'  <rect x="0.5" y="0.5" rx="4.5" height="{HEIGHT - 1}" width="{WIDTH - 1}" '
        f'stroke="{BORDER_COLOR}" fill="{BG_COLOR}" stroke-opacity="1"/>\n'
        f'  <text x="{_num(WIDTH / 2)}" y="{_num(title_y)}" fill="{TEXT_COLOR}" font-size="18" '
        f'font-weight="bold" text-anchor="middle">{TITLE}</text>\n'
        f"{body}\n"
        "</svg>\n"
    )
