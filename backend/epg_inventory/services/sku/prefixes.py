"""Category and brand prefix resolution.

Maps master-data names ("Lighting", "Chauvet Professional") to the fixed
three-character codes used as SKU segments. Lookups are case-insensitive and
ignore repeated whitespace; several names may share one code.
"""

import re
from collections.abc import Mapping
from functools import lru_cache

from epg_inventory.config import settings
from epg_inventory.services.sku.codec import PREFIX_PATTERN
from epg_inventory.services.sku.exceptions import UnknownPrefixError

DEFAULT_CATEGORY_PREFIXES: dict[str, str] = {
    "Lighting": "LGT",
    "Audio": "AUD",
    "Video": "VID",
    "Power & Distribution": "PWR",
    "Power": "PWR",
    "Staging": "STG",
    "Rigging": "RIG",
    "Effects": "EFX",
    "Special Effects": "EFX",
}

DEFAULT_BRAND_PREFIXES: dict[str, str] = {
    # Lighting
    "Chauvet": "CHV",
    "Chauvet Professional": "CHV",
    "Martin": "MRT",
    "Martin by Harman": "MRT",
    "ADJ": "ADJ",
    "American DJ": "ADJ",
    "Elation": "ELT",
    "Elation Professional": "ELT",
    "ARRI": "ARR",
    "Kino Flo": "KFL",
    "Litepanels": "LTP",
    "Godox": "GDX",
    "Aputure": "APT",
    # Audio
    "QSC": "QSC",
    "Shure": "SHR",
    "Yamaha": "YMH",
    "Crown": "CRN",
    "Mackie": "MCK",
    "JBL": "JBL",
    "Electro-Voice": "EVO",
    "EV": "EVO",
    "Behringer": "BEH",
    "Focusrite": "FCS",
    "AKG": "AKG",
    "Sennheiser": "SEN",
    "Rode": "RDE",
    # Unbranded stock
    "Generic": "GEN",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", name.strip()).lower()


class _PrefixTable:
    """Name -> code lookup for one kind of master data."""

    def __init__(self, kind: str, mapping: Mapping[str, str]):
        self.kind = kind
        self._codes: dict[str, str] = {}
        self._display: dict[str, str] = {}
        self._names: dict[str, str] = {}

        for name, code in mapping.items():
            code = code.strip().upper()
            if not PREFIX_PATTERN.fullmatch(code):
                raise ValueError(f"Invalid {kind} prefix {code!r} for {name!r}")
            key = normalize_name(name)
            if not key:
                raise ValueError(f"Empty {kind} name for prefix {code!r}")
            self._codes[key] = code
            self._display[key] = name.strip()

        # First name still pointing at a code is its display name
        for key, code in self._codes.items():
            self._names.setdefault(code, self._display[key])

    def resolve(self, name: str | None) -> str:
        key = normalize_name(name) if name else ""
        code = self._codes.get(key)
        if code is None:
            raise UnknownPrefixError(self.kind, name or "")
        return code

    def name_for(self, code: str) -> str | None:
        return self._names.get(code)

    def has_code(self, code: str) -> bool:
        return code in self._names

    def as_dict(self) -> dict[str, str]:
        return {self._display[key]: code for key, code in self._codes.items()}


class PrefixResolver:
    """Resolves category and brand names to SKU prefix codes.

    Pure lookup over the configured mapping, no database access.

    Usage:
        resolver = PrefixResolver()
        resolver.resolve_category_prefix("Lighting")  # "LGT"
        resolver.resolve_brand_prefix("chauvet")      # "CHV"
    """

    def __init__(
        self,
        category_prefixes: Mapping[str, str] | None = None,
        brand_prefixes: Mapping[str, str] | None = None,
    ):
        self._categories = _PrefixTable(
            "category", DEFAULT_CATEGORY_PREFIXES if category_prefixes is None else category_prefixes
        )
        self._brands = _PrefixTable("brand", DEFAULT_BRAND_PREFIXES if brand_prefixes is None else brand_prefixes)

    def resolve_category_prefix(self, category: str | None) -> str:
        """Return the code for a category name.

        Raises:
            UnknownPrefixError: if no code is registered for the name
        """
        return self._categories.resolve(category)

    def resolve_brand_prefix(self, brand: str | None) -> str:
        """Return the code for a brand name.

        Raises:
            UnknownPrefixError: if no code is registered for the name
        """
        return self._brands.resolve(brand)

    def require_known_prefixes(self, category_prefix: str, brand_prefix: str) -> None:
        """Check that raw codes are registered.

        Raises:
            UnknownPrefixError: for the first unregistered code
        """
        if not self._categories.has_code(category_prefix):
            raise UnknownPrefixError("category prefix", category_prefix)
        if not self._brands.has_code(brand_prefix):
            raise UnknownPrefixError("brand prefix", brand_prefix)

    def category_name(self, code: str) -> str | None:
        return self._categories.name_for(code)

    def brand_name(self, code: str) -> str | None:
        return self._brands.name_for(code)

    def category_prefixes(self) -> dict[str, str]:
        return self._categories.as_dict()

    def brand_prefixes(self) -> dict[str, str]:
        return self._brands.as_dict()


@lru_cache(maxsize=1)
def get_prefix_resolver() -> PrefixResolver:
    """Resolver with the built-in tables plus overrides from settings."""
    return PrefixResolver(
        category_prefixes={**DEFAULT_CATEGORY_PREFIXES, **settings.sku_category_prefixes},
        brand_prefixes={**DEFAULT_BRAND_PREFIXES, **settings.sku_brand_prefixes},
    )
