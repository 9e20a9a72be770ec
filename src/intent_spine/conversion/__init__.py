"""Action Converter: indexer records → execution configs, and the reverse projection."""

from intent_spine.conversion.converter import (
    ActionConverter,
    ConversionIssue,
    ConversionReport,
    convert,
    convert_batch,
    get_default_converter,
    validate_and_convert,
)
from intent_spine.conversion.models import ObservedParam, RawObservedAction
from intent_spine.conversion.projection import project_batch, project_staged

__all__ = [
    "ActionConverter",
    "ConversionIssue",
    "ConversionReport",
    "convert",
    "convert_batch",
    "get_default_converter",
    "validate_and_convert",
    "ObservedParam",
    "RawObservedAction",
    "project_batch",
    "project_staged",
]
