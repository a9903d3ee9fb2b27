"""
Plotly-shaped figure description.

Converts a renderer-neutral DiagramDescription into the {data, layout}
structure Plotly.newPlot expects. Plain dicts only, nothing here imports
a charting library.
"""

import os
import sys

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.mollier.models import Curve, DiagramDescription, Trace, ZoneRegion

CURVE_COLOR = "blue"
MARKER_SIZE = 6


def trace_to_plotly(trace: Trace) -> dict:
    return {
        "x": trace.x,
        "y": trace.y,
        "mode": "lines+markers",
        "marker": {"size": MARKER_SIZE, "color": trace.color},
        "line": {"color": trace.color},
        "text": [p.text.replace("\n", "<br>") for p in trace.points],
        "hoverinfo": "text",
        "name": trace.name,
    }


def curve_to_plotly(curve: Curve) -> dict:
    return {
        "x": list(curve.temperatures),
        "y": list(curve.enthalpies),
        "mode": "lines",
        "line": {"dash": "dot", "width": 1, "color": CURVE_COLOR},
        "name": curve.name,
        "hoverinfo": "none",
    }


def region_to_plotly(region: ZoneRegion) -> dict:
    return {
        "type": "rect",
        "x0": region.x0,
        "x1": region.x1,
        "y0": region.y0,
        "y1": region.y1,
        "fillcolor": region.color,
        "line": {"width": 0},
        "layer": "below",
    }


def to_plotly_figure(diagram: DiagramDescription) -> dict:
    """Sensor traces first, then reference curves; zones as shapes.

    Sensors whose history could not be fetched are listed under "errors".
    """
    labels = diagram.axis_labels
    return {
        "data": [trace_to_plotly(t) for t in diagram.traces]
        + [curve_to_plotly(c) for c in diagram.curves],
        "layout": {
            "title": diagram.title,
            "xaxis": {"title": f"{labels.x} ({labels.x_unit})"},
            "yaxis": {"title": f"{labels.y} ({labels.y_unit})"},
            "margin": {"t": 40},
            "hovermode": "closest",
            "shapes": [region_to_plotly(r) for r in diagram.regions],
        },
        "errors": [
            {"sensor_id": t.sensor_id, "name": t.name, "error": t.error}
            for t in diagram.traces
            if t.error
        ],
    }
