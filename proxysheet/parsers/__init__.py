from proxysheet.parsers.card_list import (
    expand_requests,
    format_card_list,
    normalize_card_list,
    parse_card_line,
)

__all__ = [
    "expand_requests",
    "format_card_list",
    "normalize_card_list",
    "parse_card_line",
]
