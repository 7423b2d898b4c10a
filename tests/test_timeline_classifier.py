"""Unit tests for TimelineClassifier."""

import pytest
from datetime import datetime, timezone

from goaltrack.routine.models import RoutineCatalog, RoutineType, TimelineStatus
from goaltrack.routine.services.timeline_classifier import TimelineClassifier


def _at(hour, minute=0, second=0):
    return datetime(2025, 1, 15, hour, minute, second, tzinfo=timezone.utc)


def _catalog(**lists):
    return RoutineCatalog.model_validate(lists)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def classifier():
    return TimelineClassifier()


@pytest.fixture
def single_exercise():
    return _catalog(exercise=[{"time": "14:00", "durationMinutes": 60, "label": "Gym"}])


# ─────────────────────────────────────────────────────────────────
# Single instance boundaries
# ─────────────────────────────────────────────────────────────────


class TestSingleInstance:
    def test_inside_window_is_current(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(14, 30))
        assert entry.status == TimelineStatus.CURRENT
        assert entry.minutesUntil is None

    def test_start_instant_is_current(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(14, 0))
        assert entry.status == TimelineStatus.CURRENT

    def test_end_instant_is_missed(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(15, 0))
        assert entry.status == TimelineStatus.MISSED

    def test_within_hour_is_upcoming(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(13, 15))
        assert entry.status == TimelineStatus.UPCOMING
        assert entry.minutesUntil == 45

    def test_exactly_sixty_minutes_ahead_is_upcoming(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(13, 0))
        assert entry.status == TimelineStatus.UPCOMING
        assert entry.minutesUntil == 60

    def test_more_than_an_hour_ahead_is_excluded(self, classifier, single_exercise):
        assert classifier.classify(single_exercise, _at(12, 0)) == []
        assert classifier.classify(single_exercise, _at(12, 59, 59)) == []

    def test_seconds_before_start_count_as_one_minute(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(13, 59, 30))
        assert entry.status == TimelineStatus.UPCOMING
        assert entry.minutesUntil == 1

    def test_entry_carries_instance_fields(self, classifier, single_exercise):
        [entry] = classifier.classify(single_exercise, _at(14, 30))
        assert entry.type == RoutineType.EXERCISE
        assert entry.label == "Gym"
        assert entry.time == "14:00"
        assert entry.durationMinutes == 60
        assert entry.index == 0


# ─────────────────────────────────────────────────────────────────
# Filtering
# ─────────────────────────────────────────────────────────────────


class TestFiltering:
    def test_no_catalog_yields_empty(self, classifier):
        assert classifier.classify(None, _at(12, 0)) == []

    def test_completed_instances_are_dropped(self, classifier):
        catalog = _catalog(meal=[
            {"time": "08:00", "durationMinutes": 30, "label": "Breakfast", "completed": True},
            {"time": "08:00", "durationMinutes": 30, "label": "Second breakfast", "completed": False},
        ])
        entries = classifier.classify(catalog, _at(12, 0))
        assert [e.label for e in entries] == ["Second breakfast"]
        assert entries[0].index == 1

    def test_naps_are_included_as_sleep(self, classifier):
        catalog = _catalog(sleep={
            "wakeTime": "06:00",
            "sleepTime": "22:00",
            "naps": [{"time": "15:00", "durationMinutes": 30, "label": "Nap"}],
        })
        [entry] = classifier.classify(catalog, _at(15, 10))
        assert entry.type == RoutineType.SLEEP
        assert entry.status == TimelineStatus.CURRENT

    def test_no_completed_entry_ever_appears(self, classifier, sample_routine_settings):
        catalog = RoutineCatalog.model_validate(sample_routine_settings)
        for hour in range(24):
            entries = classifier.classify(catalog, _at(hour, 0))
            assert all(e.label != "Breakfast" for e in entries)


# ─────────────────────────────────────────────────────────────────
# Ordering
# ─────────────────────────────────────────────────────────────────


class TestOrdering:
    def test_current_then_upcoming_then_missed(self, classifier, sample_routine_settings):
        catalog = RoutineCatalog.model_validate(sample_routine_settings)

        entries = classifier.classify(catalog, _at(14, 30))

        statuses = [e.status for e in entries]
        assert statuses == [
            TimelineStatus.CURRENT,   # Gym 14:00-15:00
            TimelineStatus.UPCOMING,  # Nap 15:00
            TimelineStatus.MISSED,    # Shower 07:00
            TimelineStatus.MISSED,    # Lunch 13:00
            TimelineStatus.MISSED,    # Teeth 07:20
        ]
        assert entries[1].label == "Afternoon nap"
        assert entries[1].minutesUntil == 30

    def test_missed_entries_keep_catalog_order(self, classifier, sample_routine_settings):
        catalog = RoutineCatalog.model_validate(sample_routine_settings)

        missed = [
            e.label for e in classifier.classify(catalog, _at(14, 30))
            if e.status == TimelineStatus.MISSED
        ]

        # bath, exercise, meal, teeth, naps
        assert missed == ["Morning shower", "Lunch", "Brush teeth"]

    def test_upcoming_sorted_by_minutes_until(self, classifier):
        catalog = _catalog(
            bath=[{"time": "10:50", "durationMinutes": 10, "label": "Bath"}],
            meal=[{"time": "10:20", "durationMinutes": 10, "label": "Snack"}],
            teeth=[{"time": "10:35", "durationMinutes": 5, "label": "Teeth"}],
        )

        entries = classifier.classify(catalog, _at(10, 0))

        assert [e.label for e in entries] == ["Snack", "Teeth", "Bath"]
        minutes = [e.minutesUntil for e in entries]
        assert minutes == sorted(minutes)

    def test_equal_minutes_keep_catalog_order(self, classifier):
        catalog = _catalog(
            exercise=[{"time": "10:30", "durationMinutes": 10, "label": "Stretch"}],
            meal=[{"time": "10:30", "durationMinutes": 10, "label": "Snack"}],
        )

        entries = classifier.classify(catalog, _at(10, 0))

        assert [e.label for e in entries] == ["Stretch", "Snack"]

    def test_deterministic_for_same_inputs(self, classifier, sample_routine_settings):
        catalog = RoutineCatalog.model_validate(sample_routine_settings)
        first = classifier.classify(catalog, _at(14, 30))
        second = classifier.classify(catalog, _at(14, 30))
        assert first == second

    def test_custom_upcoming_window(self, single_exercise):
        classifier = TimelineClassifier(upcoming_window_minutes=15)
        assert classifier.classify(single_exercise, _at(13, 30)) == []
        [entry] = classifier.classify(single_exercise, _at(13, 50))
        assert entry.status == TimelineStatus.UPCOMING
