"""Filter panel component for listing screens.

Renders a screen's facets with Streamlit widgets, the active-filter chips,
the result count and the no-results message. All state lives in the
FilterPanelController, which is kept in session state across reruns.
"""

from typing import Any, Callable, Dict, List, Optional

import streamlit as st

from edufilter.config import config
from edufilter.config.logging_config import get_logger, setup_logging
from edufilter.filters.controller import FilterPanelController
from edufilter.filters.facets import ALL_VALUE, Facet, FacetKind

logger = get_logger("ui.filter_panel")

# Widget used for each facet kind
WIDGET_TYPES = {
    FacetKind.SINGLE_SELECT: "selectbox",
    FacetKind.MULTI_SELECT: "multiselect",
    FacetKind.FREE_TEXT_SEARCH: "text_input",
    FacetKind.DATE_RANGE: "date_input",
    FacetKind.BOOLEAN_TOGGLE: "checkbox",
}

COLUMNS_PER_ROW = 3


def widget_for(facet: Facet) -> Optional[str]:
    """Streamlit widget name for a facet, or None if it cannot be rendered."""
    return WIDGET_TYPES.get(facet.kind)


def format_option(facet: Facet, value: Any, counts: Optional[Dict[Any, int]] = None) -> str:
    """Option label, followed by its match count when there is one."""
    if value is None:
        return facet.placeholder or "Select..."
    label = facet.label_for(value)
    count = (counts or {}).get(value)
    return f"{label} ({count})" if count is not None else label


def results_caption(controller: FilterPanelController) -> str:
    if controller.loading:
        return "Loading..."
    return f"{controller.results_count} of {controller.total_count} results"


def get_panel_controller(key: str, factory: Callable[[], FilterPanelController]) -> FilterPanelController:
    """
    Get the controller for a screen from session state, creating it once.

    Args:
        key: Session state key, unique per screen and role.
        factory: Builds the controller on first use.
    """
    if key not in st.session_state:
        setup_logging(config.app.log_level, log_file=config.app.log_file)
        st.session_state[key] = factory()
    return st.session_state[key]


def _render_single_select(controller, facet, key, counts) -> None:
    values: List[Any] = [opt.value for opt in facet.options]
    if ALL_VALUE not in values:
        values = [None] + values

    current = controller.state.get(facet.id)
    if current is None:
        current = ALL_VALUE if ALL_VALUE in values else None
    index = values.index(current) if current in values else 0

    selected = st.selectbox(
        facet.title,
        options=values,
        index=index,
        format_func=lambda v: format_option(facet, v, counts),
        key=key,
    )
    if selected != current:
        controller.set_facet_value(facet.id, selected)


def _render_multi_select(controller, facet, key, counts) -> None:
    values = [opt.value for opt in facet.options]
    current = sorted(controller.state.get(facet.id) or [], key=str)

    selected = st.multiselect(
        facet.title,
        options=values,
        default=[v for v in current if v in values],
        format_func=lambda v: format_option(facet, v, counts),
        placeholder=facet.placeholder or "Choose options",
        key=key,
    )
    if sorted(selected, key=str) != current:
        controller.set_facet_value(facet.id, selected)


def _render_search(controller, facet, key) -> None:
    current = controller.state.get(facet.id) or ""

    text = st.text_input(
        facet.title,
        value=current,
        placeholder=facet.placeholder,
        key=key,
    )
    if text != current:
        controller.set_facet_value(facet.id, text)

    if text:
        for i, suggestion in enumerate(controller.suggestions(facet.id, text)):
            if suggestion.value == text:
                continue
            if st.button(suggestion.label, key=f"{key}_suggestion_{i}"):
                controller.set_facet_value(facet.id, str(suggestion.value))
                st.rerun()


def _render_date_range(controller, facet, key) -> None:
    st.markdown(f"**{facet.title}**")
    col1, col2 = st.columns(2)

    for col, bound_key, label in (
        (col1, facet.from_key, "From"),
        (col2, facet.to_key, "To"),
    ):
        current = controller.state.get(bound_key)
        with col:
            picked = st.date_input(label, value=current, key=f"{key}_{bound_key}")
        if picked != current:
            controller.set_facet_value(bound_key, picked)


def _render_toggle(controller, facet, key) -> None:
    current = bool(controller.state.get(facet.id))
    checked = st.checkbox(facet.placeholder or facet.title, value=current, key=key)
    if checked != current:
        controller.set_facet_value(facet.id, checked)


def render_facet(controller: FilterPanelController, facet: Facet, key_prefix: str, show_counts: bool = True) -> None:
    """Render the widget for one facet and push edits into the controller."""
    widget = widget_for(facet)
    key = f"{key_prefix}_{facet.id}"

    if widget is None:
        logger.warning(f"No widget for facet '{facet.id}' of kind '{facet.kind}'; skipping it")
        return

    if widget == "selectbox":
        counts = controller.option_counts(facet.id) if show_counts else None
        _render_single_select(controller, facet, key, counts)
    elif widget == "multiselect":
        counts = controller.option_counts(facet.id) if show_counts else None
        _render_multi_select(controller, facet, key, counts)
    elif widget == "text_input":
        _render_search(controller, facet, key)
    elif widget == "date_input":
        _render_date_range(controller, facet, key)
    elif widget == "checkbox":
        _render_toggle(controller, facet, key)


def render_filter_chips(controller: FilterPanelController, key_prefix: str) -> None:
    """Render active filters as removable chips, with a clear-all button."""
    chips = controller.chips()
    if not chips:
        return

    header_cols = st.columns([4, 1])
    with header_cols[0]:
        st.markdown("**Active filters**")
    with header_cols[1]:
        if st.button("Clear all", key=f"{key_prefix}_clear"):
            controller.clear_all()
            st.rerun()

    cols = st.columns(min(len(chips), 4))
    for i, chip in enumerate(chips):
        with cols[i % len(cols)]:
            if st.button(f"✕ {chip.label}: {chip.display_value}", key=f"{key_prefix}_chip_{chip.key}"):
                controller.remove_filter(chip.key)
                st.rerun()


def render_filter_panel(
    controller: FilterPanelController,
    key_prefix: str = "filters",
    title: str = "Filters",
    show_counts: bool = True,
    expanded: bool = False,
) -> FilterPanelController:
    """
    Render the complete filter panel for a screen.

    Args:
        controller: The screen's controller.
        key_prefix: Unique prefix for widget keys.
        title: Panel heading.
        show_counts: Whether to show per-option match counts.
        expanded: Whether the facet widgets start expanded.

    Returns:
        The controller after applying this run's edits.
    """
    header_cols = st.columns([3, 2])
    with header_cols[0]:
        if controller.active_filter_count:
            st.markdown(f"**{title}** ({controller.active_filter_count})")
        else:
            st.markdown(f"**{title}**")
    with header_cols[1]:
        st.caption(results_caption(controller))

    with st.expander(title, expanded=expanded):
        render_filter_chips(controller, key_prefix)

        facets = controller.facets
        for start in range(0, len(facets), COLUMNS_PER_ROW):
            row = facets[start:start + COLUMNS_PER_ROW]
            cols = st.columns(COLUMNS_PER_ROW)
            for col, facet in zip(cols, row):
                with col:
                    render_facet(controller, facet, key_prefix, show_counts)

    if controller.show_no_results:
        st.warning("No results match the active filters. Try different filters.")
        if st.button("Clear filters", key=f"{key_prefix}_no_results_clear"):
            controller.clear_all()
            st.rerun()
    elif not controller.loading and controller.active_filter_count:
        st.success(results_caption(controller))

    return controller
