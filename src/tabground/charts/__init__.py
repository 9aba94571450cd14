"""Charts of tabular data.

Charts are described declaratively by a :class:`ChartSpec`,
mapping fields of the data to the visual channels of the chart::

    spec = ChartSpec("point", x="gdp_per_capita", y="life_expectancy",
                     color="continent", size="population", x_scale="log")

:func:`render` binds the spec to the data of a table producing
a :class:`ChartDescription`, and :func:`draw` hands the description
to Altair to produce the actual chart, either for interactive
display in a notebook or saved to a file::

    draw(render(gapminder_2007, spec), "gdp_vs_life.html")

Tabground never draws anything by itself, rendering is delegated to
`Altair <https://altair-viz.github.io/>`_.
"""

from .altair_backend import build_chart, draw
from .description import CHART_KINDS, ChartDescription, ChartSpec, render

__all__ = (
    "CHART_KINDS",
    "ChartDescription",
    "ChartSpec",
    "build_chart",
    "draw",
    "render",
)
