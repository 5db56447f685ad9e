"""How each inventory search category filters and orders products."""

from typing import NamedTuple

from tortoise.expressions import Q

from .schemas import SearchCategory


class SearchMode(NamedTuple):
    lookup: str
    sort_key: str

    def matching(self, term: str) -> Q:
        return Q(**{self.lookup: term})


SEARCH_MODES = {
    SearchCategory.NAME: SearchMode(lookup="name__icontains", sort_key="name"),
    SearchCategory.CATEGORY: SearchMode(lookup="category__name__icontains", sort_key="category__name"),
    SearchCategory.BRAND: SearchMode(lookup="brand__name__icontains", sort_key="brand__name"),
}

DEFAULT_SORT_KEY = "quantity"


def search_mode_for(category: SearchCategory) -> SearchMode:
    return SEARCH_MODES[SearchCategory(category)]
