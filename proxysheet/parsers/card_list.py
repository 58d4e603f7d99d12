"""
Parser for pasted card lists.

One card per line. Quantity may be given as a prefix or a suffix:

    3 Luke Skywalker
    2x Darth Vader
    Boba Fett x2
    Grand Moff Tarkin (3)

Parenthetical notes that are not a quantity (set hints like "(SOR)" or
"(SOR) 010") are removed. Blank lines, comments ("#", "//") and deck export
section headers are skipped. Output order is input order.

format_card_list() writes requests back in "Nx Name" form; parsing that text
again yields the same requests, even for names starting with a lone "x".
"""

import logging
import re

from proxysheet.models.card import CardRequest

logger = logging.getLogger(__name__)

# Pattern: "3 Name", "3x Name", "3 x Name"
# Groups: (quantity, name)
QUANTITY_PREFIX_PATTERN = re.compile(r"^(\d+)\s*[xX]?\s+(.+)$")

# Pattern: "Name x3", "Name x 3", "Name 3x", "Name (3)"
QUANTITY_SUFFIX_PATTERN = re.compile(
    r"^(?P<name>.+?)\s+(?:[xX]\s*(?P<x_after>\d+)|(?P<x_before>\d+)[xX]|\((?P<paren>\d+)\))$"
)

# Set hint with a collector number at the end of the line: "(SOR) 010", "(TWI) 5a"
SET_HINT_WITH_NUMBER_PATTERN = re.compile(r"\s*\((?=[^)]*[A-Za-z])[A-Za-z0-9-]{2,8}\)\s+\d+[A-Za-z]?$")

# Any parenthetical that is not a bare number
ANNOTATION_PATTERN = re.compile(r"\((?!\s*\d+\s*\))[^()]*\)")

WHITESPACE_PATTERN = re.compile(r"\s+")

COMMENT_PREFIXES = ("#", "//")

SECTION_HEADERS = frozenset({"deck", "sideboard", "leader", "leaders", "base", "bases", "main"})


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _strip_annotations(line: str) -> str:
    line = SET_HINT_WITH_NUMBER_PATTERN.sub("", line)
    line = ANNOTATION_PATTERN.sub(" ", line)
    return _collapse(line)


def parse_card_line(line: str) -> CardRequest | None:
    """
    Parse a single line into a CardRequest.

    Args:
        line: One line of the pasted list

    Returns:
        CardRequest, or None for blank, comment, header, zero-quantity or
        name-less lines.
    """
    line = _collapse(line)
    if not line:
        return None

    if line.startswith(COMMENT_PREFIXES):
        return None

    if line.lower().rstrip(":") in SECTION_HEADERS:
        return None

    line = _strip_annotations(line)
    if not line:
        return None

    quantity = 1
    name = line

    # Prefix wins; a line carries at most one quantity marker
    match = QUANTITY_PREFIX_PATTERN.match(line)
    if match:
        quantity, name = int(match.group(1)), match.group(2)
    else:
        match = QUANTITY_SUFFIX_PATTERN.match(line)
        if match:
            count = match.group("x_after") or match.group("x_before") or match.group("paren")
            quantity, name = int(count), match.group("name")

    name = name.strip()
    if not name:
        return None

    if quantity < 1:
        logger.debug("Dropping zero-quantity line: %r", line)
        return None

    return CardRequest(raw_name=name, quantity=quantity)


def normalize_card_list(text: str) -> list[CardRequest]:
    """
    Parse pasted list text into ordered CardRequests.

    Args:
        text: Raw multi-line list

    Returns:
        One CardRequest per usable line, in input order. Empty list for
        empty input. Repeated names are NOT merged.
    """
    if not text or not text.strip():
        return []

    requests: list[CardRequest] = []
    for line in text.splitlines():
        request = parse_card_line(line)
        if request is not None:
            requests.append(request)

    return requests


def format_card_list(requests: list[CardRequest]) -> str:
    """Render requests as "Nx Name" lines, the canonical list form."""
    return "\n".join(f"{r.quantity}x {r.raw_name}" for r in requests)


def expand_requests(requests: list[CardRequest]) -> list[str]:
    """Flatten requests into one name per placement, preserving order."""
    names: list[str] = []
    for request in requests:
        names.extend([request.raw_name] * request.quantity)
    return names
