"""
A small catalog of leaf rules. Importing this package registers them in the default registry.
"""
from . import default, format, numeric, string, typed  # pylint: disable=redefined-builtin
