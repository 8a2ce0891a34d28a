from __future__ import annotations

import re
import xml.etree.ElementTree as ET

import pytest

from statscard.fetchers.contracts import MetricsSnapshot
from statscard.services.renderer import HEIGHT, WIDTH, render_card, row_positions

SVG_NS = "{http://www.w3.org/2000/svg}"
SNAPSHOT = MetricsSnapshot(
    total_stars=27,
    total_commits=1450,
    total_prs=63,
    total_issues=12,
    total_contributed_to=8,
)


def _texts(svg: str) -> list[str]:
    root = ET.fromstring(svg)
    return [(element.text or "").strip() for element in root.iter(f"{SVG_NS}text")]


def test_render_is_deterministic() -> None:
    assert render_card(SNAPSHOT, "2026") == render_card(SNAPSHOT, "2026")


def test_only_commit_label_varies_with_window() -> None:
    calendar = render_card(SNAPSHOT, "2026")
    trailing = render_card(SNAPSHOT, "last 365 days")

    assert calendar != trailing
    assert calendar.replace("(2026)", "(last 365 days)") == trailing


def test_render_contains_title_labels_and_values() -> None:
    texts = _texts(render_card(SNAPSHOT, "2026"))

    assert texts[0] == "Combined GitHub Stats"
    assert "Total Stars:" in texts
    assert "Total Commits (2026):" in texts
    assert "Total PRs:" in texts
    assert "Total Issues:" in texts
    assert "Contributed to:" in texts
    for value in ("27", "1450", "63", "12", "8"):
        assert value in texts


def test_canvas_and_palette() -> None:
    root = ET.fromstring(render_card(SNAPSHOT, "2026"))

    assert root.get("width") == str(WIDTH)
    assert root.get("height") == str(HEIGHT)
    rect = root.find(f"{SVG_NS}rect")
    assert rect is not None
    assert rect.get("fill") == "#0d1117"
    assert rect.get("stroke") == "#30363d"


def test_rows_are_balanced_and_inside_canvas() -> None:
    title_y, rows = row_positions(5)

    assert title_y == pytest.approx(32.5)
    assert rows == pytest.approx([60, 85, 110, 135, 160])
    assert all(later - earlier == pytest.approx(25) for earlier, later in zip(rows, rows[1:]))
    assert 0 < title_y < rows[0]
    assert rows[-1] < HEIGHT


def test_row_transforms_match_layout() -> None:
    svg = render_card(SNAPSHOT, "2026")
    offsets = [float(value) for value in re.findall(r'translate\(20, ([\d.]+)\)', svg)]

    assert offsets == [60, 85, 110, 135, 160]


def test_labels_are_xml_escaped() -> None:
    svg = render_card(MetricsSnapshot.empty(), "<script>&")

    assert "&lt;script&gt;&amp;" in svg
    ET.fromstring(svg)


def test_snapshot_rejects_negative_values() -> None:
    with pytest.raises(ValueError):
        MetricsSnapshot(total_stars=-1)
