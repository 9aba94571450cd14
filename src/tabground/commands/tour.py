"""Command line interface running the exploratory analysis tour.

Each step of the tour builds on the tables produced by the previous ones
through the :mod:`tabground.explore` functions and the
:class:`tabground.dataframe.Dataframe` verbs. Tables are printed
to the console in a tabular format using the :mod:`tabground.utils.tabulate`
module, charts are drawn with :func:`tabground.charts.draw`.

The tour aborts at the first failing step, reporting the kind of error.
"""

import argparse
import dataclasses
import os

import pyarrow as pa
import pyarrow.compute as pc

from tabground.charts import ChartSpec, draw
from tabground.compute import FunctionCallExpression, col, lit
from tabground.config import CHART_FORMATS, LOG_LEVELS, Settings, load_settings
from tabground.dataframe import Dataframe
from tabground.datasets import load_dataset
from tabground.errors import ConfigurationError, TabgroundError
from tabground.explore import group_aggregate, order_by, render, select, with_column
from tabground.logging_config import create_logger
from tabground.utils.tabulate import tabulate

LATEST_YEAR = 2007


def parse_args(settings: Settings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the exploratory analysis of a country-year dataset."
    )
    parser.add_argument(
        "-d", "--dataset", default="gapminder", help="The dataset to explore."
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=settings.output_dir,
        help="Where to save the charts.",
    )
    parser.add_argument(
        "-f",
        "--format",
        default=settings.chart_format,
        choices=CHART_FORMATS,
        help="File format of the charts.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=LOG_LEVELS,
        type=str.upper,
    )
    parser.add_argument(
        "--no-charts", action="store_true", help="Only print the tables."
    )
    return parser.parse_args(argv)


def show(title: str, table: pa.Table, max_rows: int = 10) -> None:
    print(f"\n{title}")
    print(tabulate(table, max_rows=max_rows))


def run_tour(
    dataset: str, output_dir: str | None, chart_format: str
) -> dict[str, pa.Table]:
    """Run the analysis steps in sequence.

    Returns the tables produced by the steps, by name.
    When ``output_dir`` is ``None`` no chart is drawn.
    """
    gapminder = load_dataset(dataset)
    show(f"{dataset}: {gapminder.num_rows} records", Dataframe(gapminder).head(5).to_arrow())

    latest = select(gapminder, FunctionCallExpression(pc.equal, col("year"), lit(LATEST_YEAR)))
    richest = order_by(latest, "gdp_per_capita", descending=True)
    show(f"Richest countries in {LATEST_YEAR}", richest)

    derived = with_column(
        latest, "pop_millions", FunctionCallExpression(pc.divide, col("population"), lit(1e6))
    )
    derived = with_column(
        derived, "gdp", lambda record: record["population"] * record["gdp_per_capita"]
    )
    show("Population in millions and total GDP", derived)

    continents = group_aggregate(
        latest,
        ["continent"],
        {
            "median_life_expectancy": ("median", "life_expectancy"),
            "max_gdp_per_capita": ("max", "gdp_per_capita"),
            "countries": ("n_distinct", "country"),
        },
    )
    show(f"Continents in {LATEST_YEAR}", continents)

    by_year = (
        Dataframe(gapminder)
        .group_by("year", "continent")
        .summarize(median_life_expectancy=("median", "life_expectancy"))
        .to_arrow()
    )
    show("Median life expectancy over the years", by_year)

    tables = {
        "gapminder": gapminder,
        "latest": latest,
        "richest": richest,
        "derived": derived,
        "continents": continents,
        "by_year": by_year,
    }
    if output_dir is not None:
        draw_charts(tables, output_dir, chart_format)
    return tables


def draw_charts(tables: dict[str, pa.Table], output_dir: str, chart_format: str) -> list:
    """Save the charts of the tour, one file for each chart."""
    charts = {
        "gdp_vs_life_expectancy": (
            tables["latest"],
            ChartSpec(
                "point",
                x="gdp_per_capita",
                y="life_expectancy",
                color="continent",
                size="population",
                x_scale="log",
                title=f"GDP per capita and life expectancy, {LATEST_YEAR}",
            ),
        ),
        "life_expectancy_histogram": (
            tables["gapminder"],
            ChartSpec("histogram", x="life_expectancy", bins=20),
        ),
        "countries_by_continent": (
            tables["latest"],
            ChartSpec("bar", x="continent", color="continent"),
        ),
        "life_expectancy_by_continent": (
            tables["gapminder"],
            ChartSpec("box", x="continent", y="life_expectancy"),
        ),
        "median_life_expectancy_by_year": (
            tables["by_year"],
            ChartSpec(
                "line", x="year", y="median_life_expectancy", color="continent"
            ),
        ),
        "gdp_vs_life_expectancy_by_continent": (
            tables["gapminder"],
            ChartSpec(
                "point",
                x="gdp_per_capita",
                y="life_expectancy",
                color="year",
                x_scale="log",
                facet="continent",
            ),
        ),
    }
    return [
        draw(render(table, spec), os.path.join(output_dir, f"{name}.{chart_format}"))
        for name, (table, spec) in charts.items()
    ]


def main(argv: list[str] | None = None) -> int:
    """Parse the command line arguments and run the tour."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        create_logger("tabground").error("Invalid configuration, %s", e)
        return 1
    args = parse_args(settings, argv)
    settings = dataclasses.replace(
        settings,
        output_dir=args.output_dir,
        chart_format=args.format,
        log_level=args.log_level,
    )
    log = create_logger("tabground", settings.log_level_value)

    try:
        run_tour(
            args.dataset,
            None if args.no_charts else settings.output_dir,
            settings.chart_format,
        )
    except TabgroundError as e:
        log.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
