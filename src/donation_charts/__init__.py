"""Animated SVG charts for the donation dashboard.

Subpackages:
 - ``charting``: scales, geometry, animation, tooltip and the render pipeline
 - ``components``: the PyQt6 host widget
 - ``design``: easing curves and the reduced motion preference
 - ``services``: lifecycle event bus
 - ``config``: engine defaults
"""

__version__ = "0.1.0"
