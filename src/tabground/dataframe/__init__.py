"""Dataframe library built on top of tabground.

A dataframe library is a tool designed to handle and manipulate structured data,
typically in the form of tables (i.e., rows and columns).
It allows users to load data from various sources (like CSV files or databases),
explore it, apply transformations, and analyze it.

Exploratory analyses are usually written as a pipeline of verbs,
each one producing a new table out of the previous one::

    filter -> mutate -> arrange -> group_by -> summarize

This module shows how to implement such a dataframe library,
using the tabground compute capabilities as its foundation.
"""

from ..compute import FunctionCallExpression, col, lit
from .dataframe import Dataframe, GroupedDataframe

__all__ = ("Dataframe", "GroupedDataframe", "FunctionCallExpression", "col", "lit")
