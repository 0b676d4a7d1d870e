from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

def matches_query(query: Optional[str], *values: Optional[str]) -> bool:
    """Case-insensitive substring match of ``query`` against any value.

    A blank query matches everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in str(value).lower() for value in values if value is not None)

def filter_by_query(
    records: Iterable[T],
    query: Optional[str],
    fields: Callable[[T], Iterable[Optional[str]]]
) -> List[T]:
    return [record for record in records if matches_query(query, *fields(record))]
