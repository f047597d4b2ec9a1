"""Filter preset management component."""

from typing import Optional

import streamlit as st

from edufilter.filters.controller import FilterPanelController
from edufilter.filters.presets import Preset


def preset_label(preset: Preset) -> str:
    """Preset name with its creation date."""
    created = preset.created_at[:10] if preset.created_at else ""
    return f"{preset.name} ({created})" if created else preset.name


def render_preset_manager(controller: FilterPanelController, key: str = "preset_manager") -> Optional[Preset]:
    """
    Render save/load/delete controls for the screen's presets.

    Args:
        controller: The screen's controller.
        key: Unique key for the Streamlit widgets.

    Returns:
        The preset applied during this run, or None.
    """
    st.markdown("**Saved filters**")

    # Save current filters
    col1, col2 = st.columns([2, 1])

    with col1:
        new_name = st.text_input(
            "Preset name",
            placeholder="Enter preset name...",
            key=f"{key}_new_name",
        )

    reason = controller.can_save_preset(new_name)
    with col2:
        st.write("")  # Spacer
        st.write("")
        if st.button("Save", key=f"{key}_save", disabled=reason is not None, help=reason):
            result = controller.save_preset(new_name)
            if result.saved and result.reason:
                st.warning(result.reason)
            elif result.saved:
                st.success(f"Saved preset: {result.preset.name}")
            else:
                st.warning(result.reason)

    presets = controller.presets
    if not presets:
        st.caption("No saved filters yet")
        return None

    st.divider()

    applied = None
    for preset in presets:
        cols = st.columns([3, 1, 1])
        with cols[0]:
            st.write(preset_label(preset))
        with cols[1]:
            if st.button("Load", key=f"{key}_load_{preset.id}"):
                controller.apply_preset(preset)
                applied = preset
        with cols[2]:
            if st.button("Delete", key=f"{key}_delete_{preset.id}", type="secondary"):
                controller.delete_preset(preset.id)
                st.rerun()

    if applied is not None:
        st.rerun()

    return applied
