"""Stable accent colours derived from bookmark ids."""
import hashlib

PALETTE: tuple[str, ...] = (
    "blue",
    "purple",
    "pink",
    "rose",
    "orange",
    "amber",
    "emerald",
    "cyan",
)


def color_tag(bookmark_id: str) -> int:
    """Palette index for an id; identical across processes and reloads."""
    digest = hashlib.sha256(bookmark_id.encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % len(PALETTE)


def is_valid_tag(tag: object) -> bool:
    return isinstance(tag, int) and not isinstance(tag, bool) and 0 <= tag < len(PALETTE)


def accent_for(tag: int) -> str:
    return PALETTE[tag % len(PALETTE)]
