from enum import Enum


class ProductSortBy(str, Enum):
    name = "name"
    price = "price"
    created = "created"
    popularity = "popularity"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"
