"""Interest matching shared by activity selection, filtering and scoring."""

from collections.abc import Iterable


def tag_matches_interest(tag: str, interest: str) -> bool:
    """Case-insensitive substring match in either direction."""
    tag_lower = tag.lower()
    interest_lower = interest.lower()
    return interest_lower in tag_lower or tag_lower in interest_lower


def matches_interests(tags: Iterable[str], interests: list[str]) -> bool:
    """Check whether any tag overlaps any declared interest.

    An empty interest list matches everything.
    """
    if not interests:
        return True
    return any(tag_matches_interest(tag, interest) for tag in tags for interest in interests)


def overlaps_interests(tags: Iterable[str], interests: list[str]) -> bool:
    """Like :func:`matches_interests` but an empty interest list matches nothing."""
    return bool(interests) and matches_interests(tags, interests)
