"""Generic utilities and helpers.

Utilities that are helpful in the other parts of the codebase
and are not specifically bound to any component,
like formatting tables for the console or naming python objects.
"""

from . import inspect, tabulate

__all__ = ("inspect", "tabulate")
