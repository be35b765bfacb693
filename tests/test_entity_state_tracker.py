"""Unit tests for per-entity containment state and transition classification."""

from app.services.entity_state_tracker import EntityStateTracker, Transition

V1 = ("vehicle", "1")
VOL = ("volunteer", "1")


class TestEntityStateTracker:
    def test_first_sighting_records_state(self):
        tracker = EntityStateTracker()
        assert tracker.observe(V1, False) is Transition.FIRST_SIGHTING
        assert tracker.get(V1) is False

    def test_inside_to_outside_is_exit(self):
        tracker = EntityStateTracker()
        tracker.observe(V1, True)
        assert tracker.observe(V1, False) is Transition.EXIT
        assert tracker.get(V1) is False

    def test_outside_to_inside_is_enter(self):
        tracker = EntityStateTracker()
        tracker.observe(V1, False)
        assert tracker.observe(V1, True) is Transition.ENTER

    def test_steady_states(self):
        tracker = EntityStateTracker()
        tracker.observe(V1, True)
        assert tracker.observe(V1, True) is Transition.STEADY
        tracker.observe(VOL, False)
        assert tracker.observe(VOL, False) is Transition.STEADY

    def test_classify_does_not_store(self):
        tracker = EntityStateTracker()
        tracker.record(V1, True)
        assert tracker.classify(V1, False) is Transition.EXIT
        assert tracker.get(V1) is True

    def test_same_id_different_type_are_separate(self):
        tracker = EntityStateTracker()
        tracker.observe(V1, True)
        assert tracker.observe(VOL, False) is Transition.FIRST_SIGHTING
        assert len(tracker) == 2

    def test_reset_clears_everything(self):
        tracker = EntityStateTracker()
        tracker.observe(V1, True)
        tracker.reset()
        assert V1 not in tracker
        assert tracker.observe(V1, False) is Transition.FIRST_SIGHTING
