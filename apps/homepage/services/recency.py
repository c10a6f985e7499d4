"""
apps.homepage.services.recency
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Ordering helpers driven by a user's recency lists.

A recency list is an ordered list of ids, most recently used first.  It is
only a sort hint: ids that no longer exist are ignored, and entities that
are absent from it keep their original relative order after every entity
that is present.

This module is **pure Python** — no Django imports.

Public API
----------
prioritise_ids(recent_ids, all_ids) -> list
sort_by_recency(items, recent_ids, key) -> list
touch_recent(recent_ids, item_id, limit) -> list
"""
from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def prioritise_ids(
    recent_ids: Iterable[Hashable] | None,
    all_ids: Iterable[Hashable],
) -> list:
    """
    Return the de-duplicated union of *recent_ids* and *all_ids*.

    Recent ids come first in recency order, followed by the remaining ids
    of *all_ids* in their given order.  Recent ids that are not in
    *all_ids* are kept; callers drop them when they fail to resolve.

    Example::

        prioritise_ids([3, 1], [1, 2, 3, 4])   # → [3, 1, 2, 4]
    """
    ordered = dict.fromkeys(recent_ids or ())
    ordered.update(dict.fromkeys(all_ids))
    return list(ordered)


def sort_by_recency(
    items: Iterable[T],
    recent_ids: Sequence[Hashable] | None,
    key: Callable[[T], Hashable],
) -> list[T]:
    """
    Stable-sort *items* by the position of ``key(item)`` in *recent_ids*.

    Items whose key is not in *recent_ids* sort after all items whose key
    is, keeping their input order.  When an id appears more than once in
    *recent_ids* its **last** position wins.

    Example::

        sort_by_recency(apps, [7, 2], key=lambda a: a.id)
    """
    items = list(items)
    if not recent_ids:
        return items

    # Later duplicates overwrite earlier ones.
    rank = {item_id: index for index, item_id in enumerate(recent_ids)}
    return sorted(items, key=lambda item: rank.get(key(item), math.inf))


def touch_recent(
    recent_ids: Iterable[Hashable] | None,
    item_id: Hashable,
    limit: int,
) -> list:
    """
    Return a new recency list with *item_id* moved to the front.

    Duplicates are removed and the result is truncated to *limit* entries.

    Example::

        touch_recent([1, 2, 3], 3, limit=3)   # → [3, 1, 2]
    """
    updated = [item_id]
    updated.extend(i for i in dict.fromkeys(recent_ids or ()) if i != item_id)
    return updated[:max(limit, 0)]
