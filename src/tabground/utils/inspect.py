"""Provide insights about Python objects."""

import inspect
from typing import Any


def get_qualname(obj: Any) -> str:
    """Get the qualified name of the given object.

    Will return the name of the object and the
    name of the module and class it belongs to,
    like `module.class.method` or `module.function`.

    Used to give a readable representation to expressions
    wrapping compute functions:

    >>> import pyarrow.compute as pc
    >>> get_qualname(pc.divide)
    'pyarrow.compute.divide'
    >>> get_qualname(lambda r: r["population"] / 1e6)
    'tabground.utils.inspect.<lambda>'
    """
    module = inspect.getmodule(obj)
    module_name = module.__name__ if module is not None else "__main__"
    if inspect.ismethod(obj):
        return f"{module_name}.{obj.__self__.__class__.__name__}.{obj.__name__}"
    elif inspect.isfunction(obj) or inspect.isbuiltin(obj):
        return f"{module_name}.{obj.__qualname__}"
    elif inspect.isclass(obj):
        return f"{module_name}.{obj.__name__}"
    elif inspect.ismodule(obj):
        return obj.__name__
    return f"{module_name}.{obj.__class__.__name__}"
