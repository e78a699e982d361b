from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

DEFAULT_SYMBOL = "VNINDEX"
CANONICAL_RESOLUTIONS = ("D", "W", "M")

QueryPairs = List[Tuple[str, str]]


def normalize_resolution(raw: Optional[str]) -> Optional[str]:
    """Map ``1D``/``1W``/``1M`` and any casing of ``D``/``W``/``M`` onto the canonical token.

    Returns ``None`` for anything else; the upstream decides whether it is valid.
    """
    value = (raw or "").strip().upper()
    if len(value) == 2 and value[0] == "1" and value[1] in CANONICAL_RESOLUTIONS:
        value = value[1:]
    if value in CANONICAL_RESOLUTIONS:
        return value
    return None


def normalize_history_params(params: Iterable[Tuple[str, str]]) -> QueryPairs:
    out: QueryPairs = []
    for key, value in params:
        if key == "resolution":
            value = normalize_resolution(value) or value
        out.append((key, value))
    return out


def normalize_symbol(raw: Optional[str]) -> str:
    return (raw or "").strip().upper() or DEFAULT_SYMBOL
