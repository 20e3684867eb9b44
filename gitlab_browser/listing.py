# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Pagination and client-side filtering of GitLab listings"""

from typing import Callable, Iterable, List, TypeVar

from .models import Page

T = TypeVar("T")


def accumulate_pages(fetch_page: Callable[[int], Page[T]]) -> List[T]:
    """Fetch every page of a listing starting at page 1 and concatenate the items.

    Stops once the current page reaches the reported total, or when the
    server stops announcing a next page. A total of 0 or 1 yields a single
    request.
    """
    items: List[T] = []
    page_number = 1
    while True:
        page = fetch_page(page_number)
        items.extend(page.items)

        if page.total_pages is not None and page.current_page >= page.total_pages:
            break
        if not page.next_page or page.next_page <= page.current_page:
            break
        page_number = page.next_page
    return items


def filter_by_name(items: Iterable[T], search_term: str) -> List[T]:
    """Keep items whose ``name`` contains ``search_term``, ignoring case"""
    if not search_term:
        return list(items)
    needle = search_term.lower()
    return [item for item in items if needle in item.name.lower()]
