"""Tabground

A tabular data explorer built for learning and teaching purposes.

Tabground walks through the steps of an exploratory data analysis
of a small static dataset of country-year observations:
filtering, sorting, deriving new columns, grouping and aggregating,
and drawing the most common kinds of charts.

The toolkit is constituted by multiple components, each isolated within its own
package and each self documented in literate programming style.

The primary components are:

* The Compute Engine, in charge of executing analyses on the data.
* The Dataframe API, which provides a verb pipeline on top of the compute engine.
* The Explore functions, pure functions from a table to a new table.
* The Datasets, which load the static data to explore.
* The Charts, which describe charts of the data and draw them with Altair.

For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import charts, compute, datasets, explore
from .errors import (
    ComputationError,
    ConfigurationError,
    DatasetNotFoundError,
    RenderError,
    SchemaError,
    TabgroundError,
)

__all__ = (
    "charts",
    "compute",
    "datasets",
    "explore",
    "TabgroundError",
    "SchemaError",
    "ComputationError",
    "DatasetNotFoundError",
    "RenderError",
    "ConfigurationError",
)
