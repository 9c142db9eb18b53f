"""Domain value objects."""

from trackspot.domain.value_objects.isrc import ISRC_PATTERN, Isrc

__all__ = ["ISRC_PATTERN", "Isrc"]
