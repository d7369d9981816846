"""Visualization helpers for the interval index."""

from .layout import render_layout

__all__ = ["render_layout"]
