import json
import logging

import pytest

from tabground.commands.tour import main, run_tour

CHARTS = [
    "countries_by_continent",
    "gdp_vs_life_expectancy",
    "gdp_vs_life_expectancy_by_continent",
    "life_expectancy_by_continent",
    "life_expectancy_histogram",
    "median_life_expectancy_by_year",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for variable in (
        "TABGROUND_DATA_DIR",
        "TABGROUND_OUTPUT_DIR",
        "TABGROUND_CHART_FORMAT",
        "TABGROUND_LOG_LEVEL",
    ):
        monkeypatch.delenv(variable, raising=False)


def test_tour_tables():
    tables = run_tour("gapminder", None, "json")

    assert tables["latest"].num_rows == 24
    assert set(tables["latest"].column("year").to_pylist()) == {2007}
    assert tables["richest"].column("country").to_pylist()[:3] == [
        "Norway",
        "Kuwait",
        "United States",
    ]
    assert tables["derived"].column_names[-2:] == ["pop_millions", "gdp"]

    continents = tables["continents"].to_pylist()
    assert [c["continent"] for c in continents] == [
        "Africa",
        "Americas",
        "Asia",
        "Europe",
        "Oceania",
    ]
    assert [c["countries"] for c in continents] == [6, 5, 5, 6, 2]
    oceania = continents[-1]
    assert oceania["median_life_expectancy"] == pytest.approx(80.7195)
    assert oceania["max_gdp_per_capita"] == pytest.approx(34435.36744)

    by_year = tables["by_year"].to_pylist()
    keys = [(r["year"], r["continent"]) for r in by_year]
    assert keys == sorted(keys)
    assert len(keys) == len(set(keys))


def test_tour_saves_charts(tmp_path, capsys):
    assert main(["--output-dir", str(tmp_path), "--format", "json"]) == 0

    saved = sorted(p.stem for p in tmp_path.glob("*.json"))
    assert saved == CHARTS
    for name in CHARTS:
        json.loads((tmp_path / f"{name}.json").read_text())

    out = capsys.readouterr().out
    assert "Richest countries in 2007" in out
    assert "Norway" in out


def test_tour_without_charts(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["--no-charts"]) == 0
    assert list(tmp_path.iterdir()) == []


def test_tour_unknown_dataset(capsys):
    assert main(["--dataset", "nope", "--no-charts"]) == 1
    assert "DatasetNotFoundError" in capsys.readouterr().out


def test_tour_invalid_configuration(monkeypatch, capsys):
    monkeypatch.setenv("TABGROUND_CHART_FORMAT", "gif")
    assert main(["--no-charts"]) == 1
    out = capsys.readouterr().out
    assert "[ERROR]" in out
    assert "Invalid configuration" in out
    assert "TABGROUND_CHART_FORMAT" in out


@pytest.mark.parametrize(
    "argv, environ, level",
    [
        (["--log-level", "warning"], {}, logging.WARNING),
        ([], {"TABGROUND_LOG_LEVEL": "debug"}, logging.DEBUG),
    ],
)
def test_tour_log_level(monkeypatch, argv, environ, level):
    for variable, value in environ.items():
        monkeypatch.setenv(variable, value)
    assert main(["--no-charts", *argv]) == 0
    assert logging.getLogger("tabground").level == level
