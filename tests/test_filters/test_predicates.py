"""Tests for the predicate evaluator."""

import logging
from datetime import date, datetime

import pandas as pd
import pytest

from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    FacetOption,
    MatchMode,
    MultiSelectFacet,
    SearchFacet,
    SingleSelectFacet,
    ToggleFacet,
    UnsupportedFacet,
)
from edufilter.filters.filter_state import FilterState
from edufilter.filters.predicates import PredicateEvaluator, filter_entities, matches
from edufilter.filters.values import parse_bound, parse_timestamp


SUBJECT_OPTIONS = [FacetOption("Math", "Math", "Math"), FacetOption("Physics", "Physics", "Physics")]

TUTORS = [
    {"id": 1, "subjects": ["Math"]},
    {"id": 2, "subjects": ["Physics"]},
    {"id": 3, "subjects": ["Math", "Physics"]},
]

SUBJECT_BINDINGS = {"subject": lambda t: t["subjects"]}


def _ids(entities):
    return [e["id"] for e in entities]


class TestExampleScenarios:
    """End-to-end matching examples."""

    def test_single_select_matches_collection_membership(self):
        facets = [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        state = FilterState({"subject": "Math"})

        result = filter_entities(TUTORS, facets, state, SUBJECT_BINDINGS)

        assert _ids(result) == [1, 3]

    def test_multi_select_is_or_within_facet(self):
        facets = [MultiSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        state = FilterState({"subject": {"Math", "Physics"}})

        result = filter_entities(TUTORS, facets, state, SUBJECT_BINDINGS)

        assert _ids(result) == [1, 2, 3]

    def test_date_range_with_only_from(self):
        facets = [DateRangeFacet(id="date")]
        entities = [
            {"id": "old", "date": "2023-12-31T00:00:00Z"},
            {"id": "new", "date": "2024-01-02T00:00:00Z"},
        ]
        state = FilterState({"date_from": date(2024, 1, 1)})

        assert _ids(filter_entities(entities, facets, state)) == ["new"]

    def test_free_text_is_case_insensitive_substring(self):
        facets = [SearchFacet(id="tutor")]
        entity = {"tutor": "Ana Pérez"}

        assert matches(entity, facets, FilterState({"tutor": "ana"}))
        assert not matches(entity, facets, FilterState({"tutor": "bruno"}))


class TestCombination:
    """Tests for how facets combine."""

    def test_empty_state_matches_everything(self):
        facets = [
            SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS),
            SearchFacet(id="name"),
            DateRangeFacet(id="date"),
            ToggleFacet(id="online"),
        ]
        entities = [{"id": 1}, {"id": 2, "subject": "Math"}]

        assert filter_entities(entities, facets, FilterState()) == entities

    def test_and_across_facets(self):
        facets = [
            MultiSelectFacet(id="subject", options=SUBJECT_OPTIONS),
            SearchFacet(id="name"),
        ]
        entities = [
            {"id": 1, "subject": "Math", "name": "Ana"},
            {"id": 2, "subject": "Physics", "name": "Bruno"},
            {"id": 3, "subject": "Math", "name": "Carla"},
        ]
        state = FilterState({"subject": {"Math", "Physics"}, "name": "an"})

        assert _ids(filter_entities(entities, facets, state)) == [1]

    def test_adding_an_option_never_removes_matches(self):
        facets = [MultiSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        narrow = filter_entities(TUTORS, facets, FilterState({"subject": {"Math"}}), SUBJECT_BINDINGS)
        wide = filter_entities(TUTORS, facets, FilterState({"subject": {"Math", "Physics"}}), SUBJECT_BINDINGS)

        assert set(_ids(narrow)) <= set(_ids(wide))

    def test_input_order_is_kept(self):
        facets = [SearchFacet(id="name")]
        entities = [{"name": "zeta"}, {"name": "alpha"}, {"name": "beta"}]

        result = filter_entities(entities, facets, FilterState({"name": "a"}))

        assert [e["name"] for e in result] == ["zeta", "alpha", "beta"]

    def test_entities_are_not_mutated(self):
        entities = [{"id": 1, "subject": "Math"}]
        before = [dict(e) for e in entities]

        filter_entities(entities, [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)], {"subject": "Math"})

        assert entities == before

    def test_plain_mapping_state(self):
        facets = [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        assert matches({"subject": "Math"}, facets, {"subject": "Math"})

    def test_object_entities(self):
        class Tutor:
            def __init__(self, subject):
                self.subject = subject

        facets = [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        result = filter_entities([Tutor("Math"), Tutor("Physics")], facets, {"subject": "Physics"})

        assert [t.subject for t in result] == ["Physics"]


class TestMatchModes:
    """Tests for select match modes."""

    def test_all_sentinel_imposes_nothing(self):
        facets = [SingleSelectFacet(
            id="subject",
            options=[FacetOption(ALL_VALUE, "All", ALL_VALUE)] + SUBJECT_OPTIONS,
        )]
        entities = [{"subject": "Math"}, {}]

        assert len(filter_entities(entities, facets, {"subject": ALL_VALUE})) == 2

    def test_at_least(self):
        facets = [SingleSelectFacet(
            id="rating",
            match=MatchMode.AT_LEAST,
            options=[FacetOption("4", "4+", "4"), FacetOption("3", "3+", "3")],
        )]
        entities = [{"rating": 4.5}, {"rating": 4}, {"rating": 3.9}, {"rating": "4.2"}]

        result = filter_entities(entities, facets, {"rating": "4"})

        assert [e["rating"] for e in result] == [4.5, 4, "4.2"]

    def test_at_least_uses_minimum(self):
        facets = [SingleSelectFacet(
            id="experience",
            match=MatchMode.AT_LEAST,
            options=[FacetOption("expert", "Expert", "expert", minimum=100)],
        )]
        entities = [{"experience": 100}, {"experience": 99}]

        assert len(filter_entities(entities, facets, {"experience": "expert"})) == 1

    def test_in_range_is_inclusive(self):
        facets = [SingleSelectFacet(
            id="duration",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption("short", "Short", "short", maximum=29),
                FacetOption("medium", "Medium", "medium", minimum=30, maximum=90),
            ],
        )]
        entities = [{"duration": 29}, {"duration": 30}, {"duration": 90}, {"duration": 91}]

        result = filter_entities(entities, facets, {"duration": "medium"})

        assert [e["duration"] for e in result] == [30, 90]

    def test_within_days(self):
        now = datetime(2024, 6, 15, 12, 0)
        facets = [SingleSelectFacet(
            id="last_activity",
            match=MatchMode.WITHIN_DAYS,
            options=[FacetOption("week", "Last week", "week", maximum=7)],
        )]
        entities = [
            {"last_activity": "2024-06-10T00:00:00Z"},
            {"last_activity": "2024-06-01T00:00:00Z"},
        ]

        evaluator = PredicateEvaluator(facets, now=lambda: now)
        result = evaluator.filter(entities, {"last_activity": "week"})

        assert result == [entities[0]]

    def test_multi_select_ranges(self):
        facets = [MultiSelectFacet(
            id="size",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption("small", "Small", "small", maximum=9),
                FacetOption("large", "Large", "large", minimum=100),
            ],
        )]
        entities = [{"size": 5}, {"size": 50}, {"size": 500}]

        result = filter_entities(entities, facets, {"size": {"small", "large"}})

        assert [e["size"] for e in result] == [5, 500]


class TestDates:
    """Tests for date range facets."""

    FACETS = [DateRangeFacet(id="date")]

    def test_date_only_to_includes_whole_day(self):
        entities = [{"date": "2024-01-31T23:59:00Z"}, {"date": "2024-02-01T00:00:00Z"}]

        result = filter_entities(entities, self.FACETS, {"date_to": date(2024, 1, 31)})

        assert result == [entities[0]]

    def test_datetime_bounds(self):
        entities = [{"date": "2024-01-31T10:00:00Z"}, {"date": "2024-01-31T14:00:00Z"}]

        result = filter_entities(entities, self.FACETS, {"date_from": datetime(2024, 1, 31, 12, 0)})

        assert result == [entities[1]]

    def test_both_bounds(self):
        entities = [{"date": d} for d in ("2024-01-01", "2024-01-15", "2024-02-01")]
        state = {"date_from": date(2024, 1, 10), "date_to": date(2024, 1, 20)}

        assert filter_entities(entities, self.FACETS, state) == [entities[1]]

    def test_pandas_timestamps(self):
        entities = [{"date": pd.Timestamp("2024-03-01", tz="UTC")}]
        assert len(filter_entities(entities, self.FACETS, {"date_from": date(2024, 2, 1)})) == 1

    def test_unparseable_timestamp_fails(self):
        entities = [{"date": "sometime"}]
        assert filter_entities(entities, self.FACETS, {"date_from": date(2024, 2, 1)}) == []


class TestMissingFields:
    """Tests for entities without the bound field."""

    def test_missing_field_fails_active_select(self):
        facets = [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        assert not matches({}, facets, {"subject": "Math"})

    def test_missing_field_fails_search(self):
        assert not matches({"name": None}, [SearchFacet(id="name")], {"name": "ana"})

    def test_missing_field_fails_date(self):
        assert not matches({}, [DateRangeFacet(id="date")], {"date_from": date(2024, 1, 1)})

    def test_missing_toggle_field_means_false(self):
        facets = [ToggleFacet(id="online")]
        entities = [{"online": True}, {"online": False}, {}]

        assert filter_entities(entities, facets, {"online": True}) == [entities[0]]

    def test_nan_counts_as_missing(self):
        """Pandas missing markers never satisfy a constraint."""
        facets = [ToggleFacet(id="online"), SearchFacet(id="city")]

        assert not matches({"online": float("nan"), "city": "Lima"}, facets, {"online": True})
        assert not matches({"city": float("nan")}, facets, {"city": "an"})
        assert not matches({"city": pd.NA}, facets, {"city": "an"})

    def test_failing_binding_counts_as_missing(self):
        facets = [SearchFacet(id="tutor")]
        bindings = {"tutor": lambda e: e["profile"]["name"]}

        assert not matches({}, facets, {"tutor": "ana"}, bindings)


class TestFailOpen:
    """Tests for configuration problems during evaluation."""

    def test_unknown_kind_matches_and_warns(self, caplog):
        facets = [UnsupportedFacet(id="mood", raw_kind="slider")]

        with caplog.at_level(logging.WARNING, logger="edufilter"):
            assert matches({}, facets, {"mood": "happy"})

        assert "unknown kind 'slider'" in caplog.text

    def test_unknown_option_value_matches_and_warns(self, caplog):
        facets = [SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS)]

        with caplog.at_level(logging.WARNING, logger="edufilter"):
            assert matches({"subject": "Biology"}, facets, {"subject": "Art"})

        assert "not an option" in caplog.text

    def test_warning_logged_once_per_facet(self, caplog):
        facets = [UnsupportedFacet(id="mood", raw_kind="slider")]
        evaluator = PredicateEvaluator(facets)

        with caplog.at_level(logging.WARNING, logger="edufilter"):
            evaluator.filter([{}, {}, {}], {"mood": "happy"})

        assert caplog.text.count("unknown kind") == 1

    def test_unknown_multi_value_ignored(self):
        facets = [MultiSelectFacet(id="subject", options=SUBJECT_OPTIONS)]
        entities = [{"subject": "Math"}, {"subject": "Physics"}]

        result = filter_entities(entities, facets, {"subject": {"Math", "Art"}})

        assert result == [entities[0]]


class TestKeyword:
    """Tests for the basic keyword search."""

    def test_keyword_default_fields(self):
        entities = [{"name": "Ana", "bio": "Loves algebra"}, {"name": "Bruno", "bio": "Physics"}]
        result = filter_entities(entities, [], {}, keyword="ALGEBRA")

        assert result == [entities[0]]

    def test_keyword_custom_fields(self):
        entities = [{"name": "Ana", "email": "x@y.com"}, {"name": "Bruno", "email": "ana@y.com"}]
        result = filter_entities(entities, [], {}, keyword="ana", keyword_fields=lambda e: [e["name"]])

        assert result == [entities[0]]

    def test_blank_keyword_matches_all(self):
        assert len(filter_entities([{"a": "b"}, {}], [], {}, keyword="  ")) == 2


class TestOptionCounts:
    """Tests for per-option match counts."""

    def test_counts_ignore_own_selection(self):
        facets = [
            SingleSelectFacet(
                id="subject",
                options=[FacetOption(ALL_VALUE, "All", ALL_VALUE)] + SUBJECT_OPTIONS,
            ),
        ]
        evaluator = PredicateEvaluator(facets, SUBJECT_BINDINGS)

        counts = evaluator.option_counts(TUTORS, {"subject": "Math"}, "subject")

        assert counts == {ALL_VALUE: 3, "Math": 2, "Physics": 2}

    def test_counts_respect_other_facets(self):
        facets = [
            SingleSelectFacet(id="subject", options=SUBJECT_OPTIONS),
            SearchFacet(id="name"),
        ]
        entities = [
            {"subject": "Math", "name": "Ana"},
            {"subject": "Physics", "name": "Ana María"},
            {"subject": "Math", "name": "Bruno"},
        ]
        evaluator = PredicateEvaluator(facets)

        counts = evaluator.option_counts(entities, {"name": "ana"}, "subject")

        assert counts == {"Math": 1, "Physics": 1}

    def test_no_counts_for_search(self):
        evaluator = PredicateEvaluator([SearchFacet(id="name")])
        assert evaluator.option_counts([{"name": "a"}], {}, "name") == {}


class TestValueParsing:
    """Tests for timestamp and bound parsing."""

    def test_parse_timestamp_z_suffix(self):
        assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5)

    def test_parse_timestamp_offset_to_utc(self):
        assert parse_timestamp("2024-01-02T03:00:00-05:00") == datetime(2024, 1, 2, 8, 0, 0)

    def test_parse_timestamp_date(self):
        assert parse_timestamp(date(2024, 1, 2)) == datetime(2024, 1, 2)

    def test_parse_timestamp_garbage(self):
        assert parse_timestamp("soon") is None
        assert parse_timestamp(42) is None
        assert parse_timestamp(pd.NaT) is None

    def test_parse_bound_keeps_dates(self):
        assert parse_bound("2024-01-02") == date(2024, 1, 2)
        assert parse_bound("2024-01-02T10:00:00Z") == datetime(2024, 1, 2, 10, 0)

    def test_parse_bound_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_bound(12)
