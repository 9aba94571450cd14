"""Shell commands exposing Tabground functionalities.

Tour
====

``tabground-tour`` runs the steps of the exploratory analysis
of the Gapminder dataset in sequence, printing the resulting
tables and saving the charts::

    tabground-tour --output-dir charts --format html

Pass ``--no-charts`` to only print the tables.
"""
