"""Design helpers: easing curves and the reduced motion preference."""

from .motion import parse_cubic_bezier, resolve_easing  # noqa: F401
from .reduced_motion import (  # noqa: F401
    adjust_duration,
    is_reduced_motion,
    set_reduced_motion,
    temporarily_reduced_motion,
)
