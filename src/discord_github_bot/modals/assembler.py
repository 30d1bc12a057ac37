"""
Merging of submitted modal values and rendering of the final issue body.

Bodies are rendered in the order the fields were configured so that the
issue reads the same way the form did.
"""

from typing import List, Mapping, Optional, Sequence, Tuple

from discord_github_bot.modals.models import FieldSpec, ModalSession


PLACEHOLDER_LIMIT = 100
ELLIPSIS = "..."


def resolve_label(fields: Sequence[FieldSpec], custom_id: str) -> str:
    """Return the display label for `custom_id`, or the id itself when unknown."""
    for spec in fields:
        if spec.custom_id == custom_id:
            return spec.label
    return custom_id


def merge_submission(session: ModalSession, submitted: Mapping[str, str]) -> int:
    """
    Merge submitted field values into a session.

    Args:
        session: The session being filled in
        submitted: Values keyed by field custom id

    Returns:
        Number of values collected so far
    """
    for custom_id, value in submitted.items():
        label = resolve_label(session.fields, custom_id)
        session.collected[label] = value
    return len(session.collected)


def is_complete(session: ModalSession) -> bool:
    return len(session.collected) >= len(session.fields)


def _ordered_items(
    collected: Mapping[str, str],
    fields: Optional[Sequence[FieldSpec]],
) -> List[Tuple[str, str]]:
    if fields is None:
        return list(collected.items())

    items = []
    seen = set()
    for spec in fields:
        if spec.label in collected and spec.label not in seen:
            items.append((spec.label, collected[spec.label]))
            seen.add(spec.label)
    # Values keyed by a raw custom id (no matching field) keep insertion order.
    for label, value in collected.items():
        if label not in seen:
            items.append((label, value))
    return items


def render_body(
    collected: Mapping[str, str],
    username: str,
    user_id: str,
    fields: Optional[Sequence[FieldSpec]] = None,
) -> str:
    """
    Render the issue body for a completed submission.

    Each value becomes a `### {label}` section followed by a footer naming
    the Discord user who submitted it.

    Args:
        collected: Values keyed by display label
        username: Discord username of the submitter
        user_id: Discord user id of the submitter
        fields: Field order to render in; insertion order when omitted

    Returns:
        Markdown issue body
    """
    parts = [f"### {label}\n{value}\n\n" for label, value in _ordered_items(collected, fields)]
    parts.append(f"\n---\nSubmitted via Discord by: {username} ({user_id})")
    return "".join(parts)


def format_legacy_body(username: str, user_id: str, description: str) -> str:
    """Body used by single-page forms that submit a plain description."""
    return (
        f"**Reported by:** {username} (ID: {user_id})\n"
        f"\n"
        f"{description}\n"
        f"\n"
        f"---\n"
        f"*This issue was automatically created from Discord*"
    )


def truncate_for_display(text: str, limit: int = PLACEHOLDER_LIMIT) -> str:
    """Shorten `text` to at most `limit` characters, marking the cut with '...'."""
    if len(text) > limit:
        return text[:limit - len(ELLIPSIS)] + ELLIPSIS
    return text

