"""
Pagination of issue form fields into Discord-sized modal pages.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from discord_github_bot.modals.models import FieldSpec, MAX_FIELDS_PER_PAGE


@dataclass(frozen=True)
class PageInfo:
    """
    Paging progress of a multi-part form.

    Attributes:
        remaining: Fields of the next page to render (empty when complete)
        total_pages: ceil(N / page_size)
        current_page: ceil(collected / page_size), the number of finished pages
        is_complete: Every field has a value
    """

    remaining: Tuple[FieldSpec, ...]
    total_pages: int
    current_page: int
    is_complete: bool


def paginate(
    fields: Sequence[FieldSpec],
    collected_count: int,
    page_size: int = MAX_FIELDS_PER_PAGE,
) -> PageInfo:
    """
    Compute the next page and progress for `collected_count` gathered values.

    Args:
        fields: All fields of the form, in page order
        collected_count: Number of values gathered so far
        page_size: Maximum fields per page

    Returns:
        PageInfo describing the next page
    """
    total = len(fields)
    start = min(max(collected_count, 0), total)
    end = min(start + page_size, total)

    return PageInfo(
        remaining=tuple(fields[start:end]),
        total_pages=math.ceil(total / page_size),
        current_page=math.ceil(start / page_size),
        is_complete=collected_count >= total,
    )


def split_pages(
    fields: Sequence[FieldSpec],
    page_size: int = MAX_FIELDS_PER_PAGE,
) -> List[Tuple[FieldSpec, ...]]:
    """Split `fields` into consecutive pages of at most `page_size`."""
    return [
        tuple(fields[i:i + page_size])
        for i in range(0, len(fields), page_size)
    ]


def first_page(fields: Sequence[FieldSpec]) -> Tuple[FieldSpec, ...]:
    return paginate(fields, 0).remaining


def needs_multiple_pages(fields: Sequence[FieldSpec]) -> bool:
    return len(fields) > MAX_FIELDS_PER_PAGE
