"""Declarative description of charts.

A :class:`ChartSpec` declares which kind of chart to draw
and which fields of the data map to which visual channel
(x, y, color, size, shape), the scale of the axes and the
field to split the chart in multiple facets.

:func:`render` combines a spec with the data of a table into a
:class:`ChartDescription` which contains everything the rendering
backend needs to draw the chart. It performs no transformation of
the data, it only checks that the spec is consistent with it.
"""

import logging
from dataclasses import dataclass

import pyarrow as pa

from ..errors import RenderError

log = logging.getLogger(__name__)

CHART_KINDS = ("point", "line", "bar", "histogram", "box")
SCALES = ("linear", "log")
CHANNELS = ("x", "y", "color", "size", "shape", "facet")

# Channels that must be mapped for each kind of chart.
REQUIRED_CHANNELS = {
    "point": ("x", "y"),
    "line": ("x", "y"),
    "box": ("x", "y"),
    "bar": ("x",),
    "histogram": ("x",),
}


@dataclass(frozen=True)
class ChartSpec:
    """Which chart to draw and how fields map to visual channels.

    >>> ChartSpec("point", x="gdp_per_capita", y="life_expectancy", x_scale="log").channels()
    {'x': 'gdp_per_capita', 'y': 'life_expectancy'}
    """

    kind: str
    x: str | None = None
    y: str | None = None
    color: str | None = None
    size: str | None = None
    shape: str | None = None
    x_scale: str = "linear"
    y_scale: str = "linear"
    facet: str | None = None
    facet_columns: int = 3
    bins: int = 30
    title: str | None = None

    def channels(self) -> dict[str, str]:
        """The channels that are mapped to a field, in the form {channel: field}."""
        mapping = {}
        for channel in CHANNELS:
            field = getattr(self, channel)
            if field is not None:
                mapping[channel] = field
        return mapping


@dataclass(frozen=True)
class ChartDescription:
    """A chart spec bound to the data it has to represent.

    :param spec: The chart to draw.
    :param field_types: The encoding type of each mapped field,
                        ``quantitative``, ``ordinal``, ``temporal``
                        or ``nominal``.
    :param values: The records of the data, as plain python values.
    """

    spec: ChartSpec
    field_types: dict[str, str]
    values: tuple[dict, ...]

    def channels(self) -> dict[str, str]:
        return self.spec.channels()

    def __str__(self) -> str:
        return f"ChartDescription({self.spec.kind}, {self.channels()}, rows={len(self.values)})"


def encoding_type(datatype: pa.DataType) -> str:
    """Map an arrow type to the matching chart encoding type."""
    if pa.types.is_integer(datatype) or pa.types.is_floating(datatype):
        return "quantitative"
    elif pa.types.is_temporal(datatype):
        return "temporal"
    elif pa.types.is_boolean(datatype):
        return "ordinal"
    return "nominal"


def render(table: pa.Table | pa.RecordBatch, spec: ChartSpec) -> ChartDescription:
    """Bind a chart spec to the data of a table.

    :raises RenderError: when the kind or the scales are unknown,
                         a required channel is not mapped or
                         a mapped field is not in the table.
    """
    if spec.kind not in CHART_KINDS:
        raise RenderError(
            f"Unknown chart kind {spec.kind!r}, expected one of {', '.join(CHART_KINDS)}"
        )
    for axis, scale in (("x", spec.x_scale), ("y", spec.y_scale)):
        if scale not in SCALES:
            raise RenderError(
                f"Unknown {axis} scale {scale!r}, expected one of {', '.join(SCALES)}"
            )

    channels = spec.channels()
    for channel in REQUIRED_CHANNELS[spec.kind]:
        if channel not in channels:
            raise RenderError(f"A {spec.kind} chart requires the {channel} channel")

    field_types = {}
    for channel, field in channels.items():
        index = table.schema.get_field_index(field)
        if index == -1:
            raise RenderError(
                f"Channel {channel} references unknown field {field!r}, "
                f"available fields are: {', '.join(table.schema.names)}"
            )
        field_types[field] = encoding_type(table.schema.field(index).type)

    if spec.kind == "histogram" and field_types[spec.x] != "quantitative":
        raise RenderError(f"Histogram requires a numeric field, {spec.x!r} is not")
    for axis, scale in (("x", spec.x_scale), ("y", spec.y_scale)):
        field = getattr(spec, axis)
        if scale == "log" and (field is None or field_types[field] != "quantitative"):
            raise RenderError(f"A log scale requires a numeric field on the {axis} axis")

    log.debug("Rendering %s chart of %d rows", spec.kind, table.num_rows)
    return ChartDescription(
        spec=spec,
        field_types=field_types,
        values=tuple(table.to_pylist()),
    )
