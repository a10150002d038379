"""
Report category sets.

A CategorySet is the union of zero or more ReportCategory flags stored as
one unsigned 64-bit integer. Only the low 23 bits carry categories; the
remaining bits are accepted but never decoded.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from .enums import ReportCategory
from .exceptions import InvalidCategoriesError


CATEGORY_BITS = 23
MAX_VALUE = (1 << 64) - 1

# Wire code -> human readable title, as listed in the AbuseIPDB docs
CATEGORY_NAMES: dict[int, str] = {
    1: "DNS Compromise",
    2: "DNS Poisoning",
    3: "Fraud Orders",
    4: "DDoS Attack",
    5: "FTP Brute-Force",
    6: "Ping of Death",
    7: "Phishing",
    8: "Fraud VoIP",
    9: "Open Proxy",
    10: "Web Spam",
    11: "Email Spam",
    12: "Blog Spam",
    13: "VPN IP",
    14: "Port Scan",
    15: "Hacking",
    16: "SQL Injection",
    17: "Spoofing",
    18: "Brute-Force",
    19: "Bad Web Bot",
    20: "Exploited Host",
    21: "Web App Attack",
    22: "SSH",
    23: "IoT Targeted",
}


@dataclass(frozen=True)
class CategorySet:
    """Immutable bit set of report categories."""

    value: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"CategorySet value must be an int, got {type(self.value).__name__}")
        if self.value < 0 or self.value > MAX_VALUE:
            raise ValueError(f"CategorySet value out of 64-bit range: {self.value}")

    @classmethod
    def of(cls, *categories: ReportCategory) -> "CategorySet":
        """Build a set from individual categories."""
        value = 0
        for category in categories:
            value |= category.value
        return cls(value)

    @classmethod
    def from_wire_codes(cls, codes: Iterable[int]) -> "CategorySet":
        """
        Build a set from API category numbers (1-23).

        Raises:
            InvalidCategoriesError: If a code is outside 1-23
        """
        value = 0
        for code in codes:
            if not 1 <= code <= CATEGORY_BITS:
                raise InvalidCategoriesError(
                    code="unknown_category",
                    message=f"Unknown category code: {code}",
                    details={"category": code},
                )
            value |= 1 << (code - 1)
        return cls(value)

    @property
    def is_empty(self) -> bool:
        return self.value == 0

    def union(self, other: Union["CategorySet", ReportCategory]) -> "CategorySet":
        """Return the bitwise union of this set and a set or single category."""
        return CategorySet(self.value | _bits_of(other))

    def contains(self, category: ReportCategory) -> bool:
        return bool(self.value & category.value)

    def iter_set_bits(self) -> Iterator[int]:
        """Yield the positions (0-22) of set category bits in ascending order."""
        for position in range(CATEGORY_BITS):
            if self.value & (1 << position):
                yield position

    def categories(self) -> list[ReportCategory]:
        return [ReportCategory(1 << position) for position in self.iter_set_bits()]

    def wire_codes(self) -> list[int]:
        return decode(self)


def _bits_of(item: Union[CategorySet, ReportCategory]) -> int:
    if isinstance(item, CategorySet):
        return item.value
    if isinstance(item, ReportCategory):
        return item.value
    raise TypeError(f"Expected CategorySet or ReportCategory, got {type(item).__name__}")


def combine(a: Union[CategorySet, ReportCategory], b: Union[CategorySet, ReportCategory]) -> CategorySet:
    """Bitwise OR of two sets or categories."""
    return CategorySet(_bits_of(a) | _bits_of(b))


def decode(category_set: CategorySet) -> list[int]:
    """
    Decompose a set into the ascending list of wire codes.

    Bits 23-63 are ignored. An empty set yields an empty list.
    """
    return [position + 1 for position in category_set.iter_set_bits()]


def _normalize_name(name: str) -> str:
    return name.strip().upper().replace("-", "_").replace(" ", "_")


def parse_categories(text: str) -> CategorySet:
    """
    Parse a comma-separated list of category names or wire codes.

    Names match ReportCategory members case-insensitively, with '-' or ' '
    in place of '_' (e.g. 'ssh,brute-force'). Numbers are wire codes
    (e.g. '18,22'). Both forms may be mixed.

    Raises:
        InvalidCategoriesError: If any token is unknown
    """
    result = CategorySet()
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        if token.isascii() and token.isdigit():
            result = result.union(CategorySet.from_wire_codes([int(token)]))
            continue
        try:
            result = result.union(ReportCategory[_normalize_name(token)])
        except KeyError:
            raise InvalidCategoriesError(
                code="unknown_category",
                message=f"Unknown category: {token}",
                details={"category": token},
            ) from None
    return result
