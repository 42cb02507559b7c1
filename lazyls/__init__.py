"""Public package surface for lazyls.

Exports ``main`` for programmatic CLI invocation and ``run_listing`` for
rendering a listing to text without touching stdout.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def run_listing(*args, **kwargs):
    """Lazily import the listing pipeline."""
    from .listing.pipeline import run_listing as _run_listing

    return _run_listing(*args, **kwargs)

__all__ = ["main", "run_listing"]
