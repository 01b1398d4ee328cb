from __future__ import annotations

PAGE_SIZE = 10

SHORTCUT_KEYS = ("1", "2", "3", "4", "5", "6", "7", "8", "9", "0")


def current_page(cursor: int) -> int:
    return cursor // PAGE_SIZE


def page_start(cursor: int) -> int:
    return current_page(cursor) * PAGE_SIZE


def page_end(cursor: int, total: int) -> int:
    return min(page_start(cursor) + PAGE_SIZE, total)


def total_pages(total: int) -> int:
    return (total + PAGE_SIZE - 1) // PAGE_SIZE


def move_cursor(cursor: int, delta: int, total: int) -> int:
    """Move the cursor by ``delta`` rows, clamped to the list without wrapping."""
    if total <= 0:
        return 0
    return max(0, min(cursor + delta, total - 1))


def shortcut_index(key: str, cursor: int, total: int) -> int | None:
    """Resolve a digit shortcut on the current page to an absolute index.

    ``1``-``9`` address the first nine rows of the page and ``0`` the tenth.
    Returns ``None`` for non-digit keys and for rows past the end of the list.
    """
    if key not in SHORTCUT_KEYS:
        return None
    index = page_start(cursor) + SHORTCUT_KEYS.index(key)
    if index >= total:
        return None
    return index
