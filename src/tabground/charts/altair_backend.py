"""Draw chart descriptions with Altair.

Altair is a declarative grammar of graphics for Vega-Lite,
so a :class:`ChartDescription` translates almost one to one
into an Altair chart: the kind picks the mark and each channel
becomes an encoding.

Histograms bin the ``x`` field and count the records of each bin,
bar charts without an ``y`` field count the records of each bar.
"""

import logging
import os
from pathlib import Path

import altair as alt

from ..errors import RenderError
from .description import ChartDescription

log = logging.getLogger(__name__)

MARKS = {
    "point": "mark_circle",
    "line": "mark_line",
    "bar": "mark_bar",
    "histogram": "mark_bar",
    "box": "mark_boxplot",
}

ENCODINGS = {
    "color": alt.Color,
    "size": alt.Size,
    "shape": alt.Shape,
}


def build_chart(description: ChartDescription) -> alt.TopLevelMixin:
    """Translate a chart description into an Altair chart."""
    spec = description.spec
    types = description.field_types
    if spec.kind not in MARKS:
        raise RenderError(f"Unknown chart kind {spec.kind!r}")

    chart = getattr(alt.Chart(alt.Data(values=list(description.values))), MARKS[spec.kind])()

    encodings = {}
    x_options = {"type": types[spec.x]}
    if spec.kind == "histogram":
        x_options["bin"] = alt.Bin(maxbins=spec.bins)
    if spec.x_scale == "log":
        x_options["scale"] = alt.Scale(type="log")
    encodings["x"] = alt.X(spec.x, **x_options)

    if spec.kind == "histogram" or (spec.kind == "bar" and spec.y is None):
        encodings["y"] = alt.Y("count()", title="count")
    else:
        y_options = {"type": types[spec.y]}
        if spec.y_scale == "log":
            y_options["scale"] = alt.Scale(type="log")
        encodings["y"] = alt.Y(spec.y, **y_options)

    for channel, encoding in ENCODINGS.items():
        field = getattr(spec, channel)
        if field is not None:
            encodings[channel] = encoding(field, type=types[field])

    chart = chart.encode(**encodings)
    if spec.facet is not None:
        chart = chart.facet(
            facet=alt.Facet(spec.facet, type=types[spec.facet]),
            columns=spec.facet_columns,
        )
    if spec.title is not None:
        chart = chart.properties(title=spec.title)
    return chart


def draw(
    description: ChartDescription, output: str | os.PathLike | None = None
) -> alt.TopLevelMixin | Path:
    """Draw a chart.

    When ``output`` is provided the chart is saved to that file,
    in the format implied by its extension (html, json, png, svg),
    and the path is returned. Otherwise the Altair chart is returned
    for interactive display.

    :raises RenderError: when the chart can't be built or saved.
    """
    try:
        chart = build_chart(description)
        # Converting to a dict validates the chart against the Vega-Lite schema.
        chart.to_dict()
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Unable to draw {description}: {e}") from e

    if output is None:
        return chart

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        chart.save(str(path))
    except Exception as e:
        raise RenderError(f"Unable to save {description} to {path}: {e}") from e
    log.info("Saved %s chart to %s", description.spec.kind, path)
    return path
