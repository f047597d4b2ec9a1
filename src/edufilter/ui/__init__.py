"""Streamlit components for listing-screen filters."""

from .filter_panel import (
    WIDGET_TYPES,
    format_option,
    get_panel_controller,
    render_facet,
    render_filter_chips,
    render_filter_panel,
    results_caption,
    widget_for,
)
from .preset_manager import preset_label, render_preset_manager

__all__ = [
    "WIDGET_TYPES",
    "format_option",
    "get_panel_controller",
    "render_facet",
    "render_filter_chips",
    "render_filter_panel",
    "results_caption",
    "widget_for",
    "preset_label",
    "render_preset_manager",
]
