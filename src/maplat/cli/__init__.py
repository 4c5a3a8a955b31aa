"""Command-line interface modules for maplat."""

from maplat.cli.inspect_map import inspect_map, main

__all__ = ['inspect_map', 'main']
