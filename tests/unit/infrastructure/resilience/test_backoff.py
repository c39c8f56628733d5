import pytest

from capsweep.infrastructure.resilience.backoff import BackoffPolicy, NETWORK_BACKOFF, THROTTLE_BACKOFF


def test_exponential_schedule():
    policy = BackoffPolicy(base_seconds=1.0)
    assert [policy.wait_for(a) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]


def test_network_backoff_uses_tenths_of_a_second():
    assert NETWORK_BACKOFF.wait_for(0) == pytest.approx(0.1)
    assert NETWORK_BACKOFF.wait_for(2) == pytest.approx(0.4)


def test_hint_wins_over_schedule():
    assert THROTTLE_BACKOFF.wait_for(3, hint_seconds=2) == 2.0


def test_zero_hint_is_respected():
    assert THROTTLE_BACKOFF.wait_for(2, hint_seconds=0) == 0.0


def test_negative_attempt_rejected():
    with pytest.raises(ValueError):
        THROTTLE_BACKOFF.wait_for(-1)
