"""Sort, filter, and end-to-end listing stages."""

from __future__ import annotations

from .filtering import VCS_DIRECTORY_NAMES, FilterSet, filter_entries
from .pipeline import ListingResult, build_nodes, build_resolver, run_listing
from .sorting import DirGrouping, SortKey, SortOrder, sort_entries

__all__ = [
    "VCS_DIRECTORY_NAMES",
    "FilterSet",
    "filter_entries",
    "ListingResult",
    "build_nodes",
    "build_resolver",
    "run_listing",
    "DirGrouping",
    "SortKey",
    "SortOrder",
    "sort_entries",
]
