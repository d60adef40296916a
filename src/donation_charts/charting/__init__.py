"""Chart-rendering engine.

Scales, shape geometry, transition scheduling and the tooltip overlay
lifecycle behind the dashboard's animated bar, line, pie and donut charts.
``RenderPipeline`` is the entry point; it asks the registry for the builder
matching ``ChartSpec.kind`` and mounts the result on a host surface.
"""

from .types import ChartSpec, StyleOptions, ResolvedStyle, Transition, TooltipState  # noqa: F401
from .registry import chart_registry, register_chart_type, ChartBuild  # noqa: F401
from .animation import AnimationScheduler, ManualClock  # noqa: F401
from .surface import HostSurface, SceneSurface  # noqa: F401
from .tooltip import TooltipController  # noqa: F401
from .pipeline import PipelineState, RenderPipeline  # noqa: F401
from .svg import render_svg  # noqa: F401
from .export import export_chart  # noqa: F401
from . import bar_chart  # noqa: F401  # registers "bar"
from . import line_chart  # noqa: F401  # registers "line"
from . import radial_charts  # noqa: F401  # registers "pie" and "donut"
