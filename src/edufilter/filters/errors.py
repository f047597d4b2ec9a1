"""Exceptions raised by the filter engine."""


class FilterError(Exception):
    """Base class for filter engine errors."""


class FacetConfigError(FilterError):
    """A facet definition is malformed (missing options, duplicate ids, ...)."""


class PresetStoreError(FilterError):
    """The preset persistence layer could not read or write."""
