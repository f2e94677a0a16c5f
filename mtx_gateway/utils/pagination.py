import re
from dataclasses import dataclass

DEFAULT_ITEMS_PER_PAGE = 100

# Plain ASCII integers only: no whitespace, underscores or non-ASCII digits.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page request as seen by gateway clients."""

    page: int
    items_per_page: int

    @property
    def upstream_index(self) -> int:
        """Zero-based page index expected by the upstream API."""
        return self.page - 1


def _positive_int(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        value = raw
    elif INTEGER_PATTERN.fullmatch(raw):
        value = int(raw)
    else:
        return None
    return value if value > 0 else None


def parse_page_request(
    page: str | int | None = None,
    items_per_page: str | int | None = None,
) -> PageRequest:
    """Normalize raw query values; missing, invalid or non-positive values fall back to defaults."""
    return PageRequest(
        page=_positive_int(page) or 1,
        items_per_page=_positive_int(items_per_page) or DEFAULT_ITEMS_PER_PAGE,
    )
