"""SKU string codec.

Canonical form: ``ORG-CAT-BRD-NNNN``, e.g. ``EPG-LGT-CHV-0001``.

- ORG: organization prefix (settings.sku_org_prefix)
- CAT / BRD: fixed-length category and brand codes
- NNNN: sequence, zero-padded to ``width`` digits. Sequences past the padded
  capacity widen the field (``EPG-LGT-CHV-10000``) unless the codec is set to
  fail closed.
"""

import re
from dataclasses import dataclass

import structlog

from epg_inventory.config import settings
from epg_inventory.services.sku.exceptions import MalformedSKUError, SequenceExhaustedError

logger = structlog.get_logger(__name__)

PREFIX_LENGTH = 3
PREFIX_PATTERN = re.compile(rf"[A-Z0-9]{{{PREFIX_LENGTH}}}")
_DIGITS = re.compile(r"[0-9]+")

# Warn once a counter has used this share of its padded capacity
EXHAUSTION_WARNING_RATIO = 0.9


@dataclass(frozen=True)
class ParsedSKU:
    """Components of a canonical SKU."""

    category_prefix: str
    brand_prefix: str
    sequence: int


def normalize(candidate: str) -> str:
    """Trim surrounding whitespace and uppercase."""
    return candidate.strip().upper()


class SkuCodec:
    """Renders and parses canonical SKU strings.

    Usage:
        codec = SkuCodec()
        sku = codec.render("LGT", "CHV", 1)  # "EPG-LGT-CHV-0001"
        codec.parse(sku)                     # ParsedSKU("LGT", "CHV", 1)
    """

    def __init__(self, org_prefix: str = "EPG", width: int = 4, *, fail_on_exhaustion: bool = False):
        if not org_prefix or "-" in org_prefix or normalize(org_prefix) != org_prefix:
            raise ValueError(f"Invalid organization prefix: {org_prefix!r}")
        if width < 1:
            raise ValueError("Sequence width must be at least 1")
        self.org_prefix = org_prefix
        self.width = width
        self.fail_on_exhaustion = fail_on_exhaustion

    @property
    def capacity(self) -> int:
        """Largest sequence that fits the padded width."""
        return 10**self.width - 1

    def remaining(self, last_issued: int) -> int:
        """Numbers left before the padded width is exceeded (never negative)."""
        return max(self.capacity - last_issued, 0)

    def render(self, category_prefix: str, brand_prefix: str, sequence: int) -> str:
        """Format a prefix pair and sequence number as a canonical SKU.

        Raises:
            ValueError: prefix codes do not match the grammar or sequence < 1
            SequenceExhaustedError: sequence exceeds capacity and fail_on_exhaustion is set
        """
        for code in (category_prefix, brand_prefix):
            if not PREFIX_PATTERN.fullmatch(code):
                raise ValueError(f"Invalid prefix code: {code!r}")
        if sequence < 1:
            raise ValueError(f"Sequence must be positive, got {sequence}")

        if sequence > self.capacity:
            if self.fail_on_exhaustion:
                raise SequenceExhaustedError(category_prefix, brand_prefix, sequence, self.capacity)
            logger.warning(
                "SKU sequence exceeded padded width",
                category_prefix=category_prefix,
                brand_prefix=brand_prefix,
                sequence=sequence,
                width=self.width,
            )
        elif sequence >= self.capacity * EXHAUSTION_WARNING_RATIO:
            logger.warning(
                "SKU sequence approaching exhaustion",
                category_prefix=category_prefix,
                brand_prefix=brand_prefix,
                sequence=sequence,
                remaining=self.remaining(sequence),
            )

        return f"{self.org_prefix}-{category_prefix}-{brand_prefix}-{sequence:0{self.width}d}"

    def parse(self, sku: str) -> ParsedSKU:
        """Split a canonical SKU into its components.

        The input must already be normalized; see normalize().

        Raises:
            MalformedSKUError: if the string does not match the grammar
        """
        parts = sku.split("-")
        if len(parts) != 4:
            raise MalformedSKUError(sku, f"expected 4 segments, got {len(parts)}")

        org, category_prefix, brand_prefix, digits = parts
        if org != self.org_prefix:
            raise MalformedSKUError(sku, f"must start with {self.org_prefix!r}")
        if not PREFIX_PATTERN.fullmatch(category_prefix):
            raise MalformedSKUError(sku, f"category prefix must be {PREFIX_LENGTH} letters or digits")
        if not PREFIX_PATTERN.fullmatch(brand_prefix):
            raise MalformedSKUError(sku, f"brand prefix must be {PREFIX_LENGTH} letters or digits")
        if not _DIGITS.fullmatch(digits):
            raise MalformedSKUError(sku, "sequence must be numeric")
        if len(digits) < self.width:
            raise MalformedSKUError(sku, f"sequence must have at least {self.width} digits")
        if len(digits) > self.width and digits.startswith("0"):
            raise MalformedSKUError(sku, "sequence wider than the padded width must not be zero-padded")

        sequence = int(digits)
        if sequence < 1:
            raise MalformedSKUError(sku, "sequence must be positive")

        return ParsedSKU(category_prefix=category_prefix, brand_prefix=brand_prefix, sequence=sequence)


def get_sku_codec() -> SkuCodec:
    """Build the codec from application settings."""
    return SkuCodec(
        org_prefix=settings.sku_org_prefix,
        width=settings.sku_sequence_width,
        fail_on_exhaustion=settings.sku_fail_on_exhaustion,
    )
