"""
Contains some useful utility functions to be used in rule functions.
"""
from .query_object import is_record, optional_field, required_field
