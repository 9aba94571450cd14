"""Static datasets to explore.

Tabground bundles an excerpt of the Gapminder dataset,
a collection of country-year observations of
population, GDP per capita and life expectancy.
Each record reports:

* ``country`` the name of the country
* ``continent`` where the country is
* ``year`` the year of the observation
* ``population`` number of people living in the country
* ``gdp_per_capita`` gross domestic product per person, in dollars
* ``life_expectancy`` at birth, in years

The dataset is loaded once and never modified,
all analyses produce new tables out of it::

    from tabground.datasets import load_dataset
    gapminder = load_dataset("gapminder")

Other CSV files can be made available through
:func:`register_dataset`.
"""

from .loader import (
    GAPMINDER_SCHEMA,
    DatasetInfo,
    available_datasets,
    load_dataset,
    register_dataset,
    validate_dataset,
)

__all__ = (
    "GAPMINDER_SCHEMA",
    "DatasetInfo",
    "available_datasets",
    "load_dataset",
    "register_dataset",
    "validate_dataset",
)
