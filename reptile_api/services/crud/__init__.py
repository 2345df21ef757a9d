"""
CRUD building blocks: repositories, mapping, pagination and query-by-example.
"""

from .example import Example, ExampleMatcher, StringMatcher
from .mapper import EntityMapper
from .pagination import Direction, Order, Page, PageRequest, Sort
from .repository import OwnerScopedRepository, ParentScopedRepository, Repository

__all__ = [
    "Example",
    "ExampleMatcher",
    "StringMatcher",
    "EntityMapper",
    "Direction",
    "Order",
    "Page",
    "PageRequest",
    "Sort",
    "Repository",
    "OwnerScopedRepository",
    "ParentScopedRepository",
]
