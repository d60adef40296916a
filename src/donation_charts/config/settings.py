"""Global defaults for the chart engine.

Per-kind sizes and durations mirror the dashboard components the engine
renders for (donation totals bar chart, monthly line chart, category pie and
donut). Values here are the fallbacks ``StyleOptions`` resolves unset fields
against.
"""

from __future__ import annotations

import os
from typing import Final, Mapping, Tuple

# Cartesian (bar / line) plot margins in px: top, right, bottom, left
CARTESIAN_MARGIN: Final[Tuple[int, int, int, int]] = (20, 30, 60, 60)
# Radial (pie / donut) margin between the outer radius and the svg edge
RADIAL_MARGIN: Final = 40

BAR_PALETTE: Final[Tuple[str, ...]] = ("#10B981",)
LINE_PALETTE: Final[Tuple[str, ...]] = ("#10B981", "#3B82F6", "#EF4444", "#8B5CF6")
CATEGORY_PALETTE: Final[Tuple[str, ...]] = (
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#06B6D4",
    "#F97316",
    "#EC4899",
)

# kind -> (width, height, animation duration ms, palette)
KIND_DEFAULTS: Final[Mapping[str, Tuple[int, int, int, Tuple[str, ...]]]] = {
    "bar": (500, 300, 750, BAR_PALETTE),
    "line": (600, 300, 1000, LINE_PALETTE),
    "pie": (400, 400, 750, CATEGORY_PALETTE),
    "donut": (350, 350, 750, CATEGORY_PALETTE),
}

BAND_PADDING: Final = 0.2
NICE_TICK_COUNT: Final = 10
DONUT_INNER_RATIO: Final = 0.6
# Slices at or below this share of the total get no text label
SLICE_LABEL_MIN_SHARE: Final = 0.05

BAR_STAGGER_MS: Final = 100
BAR_LABEL_DELAY_MS: Final = 500
SLICE_LABEL_DELAY_MS: Final = 500
DONUT_LABEL_DELAY_MS: Final = 1000
DONUT_LABEL_STAGGER_MS: Final = 100
DONUT_CENTER_DELAYS_MS: Final[Tuple[int, int]] = (500, 700)
SERIES_STAGGER_MS: Final = 200
MARKER_STAGGER_MS: Final = 50
MARKER_GROW_MS: Final = 300
MARKER_RADIUS: Final = 5.0
MARKER_HOVER_RADIUS: Final = 8.0

HOVER_TRANSITION_MS: Final = 200
TOOLTIP_FADE_IN_MS: Final = 200
TOOLTIP_FADE_OUT_MS: Final = 500
TOOLTIP_OPACITY: Final = 0.9
TOOLTIP_OFFSET: Final[Tuple[float, float]] = (10.0, -28.0)

EMPTY_STATE_TEXT: Final = "No data available"

REDUCED_MOTION_ENV: Final = "DONATION_CHARTS_REDUCED_MOTION"
# Qt host widget repaint cadence (~60 FPS)
FRAME_INTERVAL_MS: Final = int(os.environ.get("DONATION_CHARTS_FRAME_MS", "16"))
