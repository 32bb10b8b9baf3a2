"""Helpers over protean's DAO query API."""

PAGE_SIZE = 500


def fetch_all(queryset, page_size: int = PAGE_SIZE) -> list:
    """Every record matching ``queryset``, read page by page.

    QuerySet.all() applies a default page limit; callers that need the
    complete set (e.g. a product's review listing) go through here.
    """
    items = []
    offset = 0
    while True:
        page = queryset.offset(offset).limit(page_size).all().items
        items.extend(page)
        if len(page) < page_size:
            return items
        offset += page_size
