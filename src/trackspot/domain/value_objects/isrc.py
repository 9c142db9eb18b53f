"""ISRC value object.

Hey future me - ISRC (International Standard Recording Code) is THE key of this
service. Format is 12 chars: 2-letter country, 3-char registrant, 7 digits
(2-digit year + 5-digit designation), e.g. USRC17607839. We accept ONLY the
canonical uppercase form without dashes - no silent normalization, because the
key doubles as the blob file name and the primary key in the store. Garbage in
should be a 400, not a new row.
"""

import re
from dataclasses import dataclass

from trackspot.domain.exceptions import ValidationError

ISRC_PATTERN = r"^[A-Z]{2}[A-Z0-9]{3}\d{7}$"
# ASCII: \d must not accept other Unicode digits (e.g. Arabic-Indic) in a primary key
_ISRC_RE = re.compile(ISRC_PATTERN, re.ASCII)


@dataclass(frozen=True)
class Isrc:
    """Validated ISRC."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _ISRC_RE.fullmatch(self.value):
            raise ValidationError(f"Invalid ISRC format: {self.value!r}")

    @classmethod
    def from_string(cls, value: str) -> "Isrc":
        """Create ISRC from string, raising ValidationError when malformed."""
        return cls(value)

    def __str__(self) -> str:
        return self.value
