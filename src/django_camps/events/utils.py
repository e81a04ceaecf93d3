"""Helpers for comparing free-text event labels."""


def normalize_label(label: str | None) -> str:
    """Return a lowercase, whitespace-collapsed form of *label*."""
    return " ".join((label or "").split()).lower()


def event_labels_match(left: str | None, right: str | None) -> bool:
    """Compare two event labels loosely.

    Labels match when equal ignoring case, or when one contains the other.
    Blank labels carry no information and match anything.

    Args:
        left: The first label (e.g. an ``Event.name``).
        right: The second label (e.g. a Stripe metadata ``event_name``).

    Returns:
        ``True`` if the labels plausibly refer to the same event.
    """
    a = normalize_label(left)
    b = normalize_label(right)
    if not a or not b:
        return True
    return a == b or a in b or b in a
