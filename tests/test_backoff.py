"""Tests for exponential backoff with jitter."""

import pytest

from hubgate.app.ratelimit import BackoffPolicy


class TestBackoffPolicy:
    """Test BackoffPolicy configuration and delays."""

    def test_default_values(self):
        policy = BackoffPolicy()

        assert policy.base_delay == 1.0
        assert policy.max_delay == 30.0
        assert policy.exponential_base == 2.0
        assert policy.max_jitter == 1.0

    def test_calculate_delay(self):
        """Test exponential delay calculation."""
        policy = BackoffPolicy()

        # Attempt 0: 1.0 * 2^0 = 1.0
        assert policy.calculate_delay(0) == 1.0
        assert policy.calculate_delay(1) == 2.0
        assert policy.calculate_delay(2) == 4.0
        assert policy.calculate_delay(3) == 8.0

    def test_calculate_delay_capped_at_max(self):
        policy = BackoffPolicy()

        # Attempt 5: 1.0 * 2^5 = 32.0, capped at 30.0
        assert policy.calculate_delay(5) == 30.0
        assert policy.calculate_delay(20) == 30.0

    def test_non_jitter_component_is_non_decreasing(self):
        policy = BackoffPolicy()
        delays = [policy.calculate_delay(n) for n in range(40)]

        assert delays == sorted(delays)

    def test_backoff_adds_jitter(self):
        policy = BackoffPolicy(jitter_source=lambda: 0.25)

        assert policy.backoff(1) == pytest.approx(2.25)

    def test_backoff_without_jitter(self):
        policy = BackoffPolicy(jitter_source=lambda: 0.0)

        assert policy.backoff(2) == 4.0

    @pytest.mark.parametrize("attempt", [0, 1, 4, 5, 10, 100])
    def test_backoff_never_exceeds_cap(self, attempt):
        policy = BackoffPolicy(jitter_source=lambda: 0.999)

        assert policy.backoff(attempt) <= 30.0

    def test_jitter_within_bounds(self):
        policy = BackoffPolicy()

        for _ in range(200):
            delay = policy.backoff(1)
            assert 2.0 <= delay < 3.0

    def test_cap_applies_to_jittered_sum(self):
        policy = BackoffPolicy(jitter_source=lambda: 0.9)

        # 16.0 + 0.9 stays below the cap, 32.0 + 0.9 does not
        assert policy.backoff(4) == pytest.approx(16.9)
        assert policy.backoff(5) == 30.0
