from auth.state_tracker import StateTracker


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _tracker(clock=None) -> StateTracker:
    return StateTracker("tesla-secret", clock=clock or FakeClock())


def test_issue_returns_unique_states() -> None:
    tracker = _tracker()

    first = tracker.issue()
    second = tracker.issue()

    assert first and second
    assert first != second
    assert set(tracker.pending) == {first, second}


def test_issue_sets_ten_minute_deadline() -> None:
    clock = FakeClock()
    tracker = _tracker(clock)

    state = tracker.issue()

    assert tracker.pending[state] == clock.now + 600


def test_validate_with_matching_cookie() -> None:
    tracker = _tracker()
    state = tracker.issue()

    assert tracker.validate(state, state) is True
    assert state not in tracker.pending


def test_validate_with_pending_fallback_only() -> None:
    tracker = _tracker()
    state = tracker.issue()

    assert tracker.validate(state, None) is True
    assert state not in tracker.pending


def test_validate_pending_state_with_stale_cookie() -> None:
    tracker = _tracker()
    older = tracker.issue()
    state = tracker.issue()

    assert tracker.validate(state, older) is True
    assert older in tracker.pending


def test_validate_with_cookie_after_restart() -> None:
    clock = FakeClock()
    state = _tracker(clock).issue()
    restarted = _tracker(clock)

    assert restarted.validate(state, state) is True


def test_replay_rejected_on_both_channels() -> None:
    tracker = _tracker()
    state = tracker.issue()

    assert tracker.validate(state, state) is True
    assert tracker.validate(state, state) is False
    assert tracker.validate(state, None) is False


def test_unknown_state_rejected() -> None:
    tracker = _tracker()
    state = tracker.issue()

    assert tracker.validate("not-a-state", state) is False
    assert state in tracker.pending


def test_empty_candidate_rejected() -> None:
    tracker = _tracker()
    tracker.issue()

    assert tracker.validate("", "") is False
    assert tracker.validate(None, None) is False


def test_forged_cookie_state_rejected() -> None:
    forged = StateTracker("attacker-secret").issue()
    tracker = _tracker()

    assert tracker.validate(forged, forged) is False


def test_expired_state_rejected_even_with_matching_cookie() -> None:
    clock = FakeClock()
    tracker = _tracker(clock)
    state = tracker.issue()

    clock.now += 601

    assert tracker.validate(state, state) is False
    assert tracker.validate(state, None) is False
    assert state not in tracker.pending


def test_state_valid_just_before_deadline() -> None:
    clock = FakeClock()
    tracker = _tracker(clock)
    state = tracker.issue()

    clock.now += 599

    assert tracker.validate(state, None) is True


def test_expired_entries_are_swept() -> None:
    clock = FakeClock()
    tracker = _tracker(clock)
    used = tracker.issue()
    tracker.issue()
    assert tracker.validate(used, used) is True

    clock.now += 601
    tracker.issue()

    assert len(tracker.pending) == 1
    assert tracker.consumed == {}


def test_clear_drops_everything() -> None:
    tracker = _tracker()
    state = tracker.issue()
    tracker.validate(tracker.issue(), None)

    tracker.clear()

    assert tracker.pending == {}
    assert tracker.consumed == {}
    assert tracker.validate(state, None) is False
