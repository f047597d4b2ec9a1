"""EduFilter - faceted filtering for the tutoring marketplace dashboards.

Listing screens (tutors, students, resources, sessions, conversations)
declare their facets, and a FilterPanelController evaluates the screen's
already-fetched records against the active filters and manages named
presets.
"""

__version__ = "1.0.0"
