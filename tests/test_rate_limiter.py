# Standard library imports
import time

# Third-party imports
from limits.storage import MemoryStorage
import pytest

# Local application imports
from decisiondeck.utils.rate_limiter import AddressRateLimiter


def test_allows_up_to_max_attempts():
    limiter = AddressRateLimiter(max_attempts=3, window_seconds=60)

    outcomes = [limiter.hit("1.2.3.4") for _ in range(3)]

    assert all(o.allowed for o in outcomes)
    assert [o.remaining for o in outcomes] == [2, 1, 0]


def test_blocks_after_max_attempts_with_retry_after():
    limiter = AddressRateLimiter(max_attempts=2, window_seconds=60)
    limiter.hit("1.2.3.4")
    limiter.hit("1.2.3.4")

    blocked = limiter.hit("1.2.3.4")

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert 1 <= blocked.retry_after <= 60


def test_window_resets_after_expiry():
    limiter = AddressRateLimiter(max_attempts=1, window_seconds=1)
    limiter.hit("1.2.3.4")
    assert limiter.hit("1.2.3.4").allowed is False

    time.sleep(1.1)

    assert limiter.hit("1.2.3.4").allowed is True


def test_keys_are_independent():
    limiter = AddressRateLimiter(max_attempts=1, window_seconds=60)
    limiter.hit("1.1.1.1")

    assert limiter.hit("2.2.2.2").allowed is True
    assert limiter.hit("1.1.1.1").allowed is False


def test_scopes_sharing_a_storage_count_separately():
    storage = MemoryStorage()
    auth = AddressRateLimiter(max_attempts=1, window_seconds=60, scope="auth", storage=storage)
    api = AddressRateLimiter(max_attempts=1, window_seconds=60, scope="api", storage=storage)

    auth.hit("1.2.3.4")

    assert api.hit("1.2.3.4").allowed is True
    assert auth.hit("1.2.3.4").allowed is False


def test_reset_key():
    limiter = AddressRateLimiter(max_attempts=1, window_seconds=60)
    limiter.hit("1.2.3.4")
    limiter.hit("5.6.7.8")
    limiter.reset_key("1.2.3.4")

    assert limiter.hit("1.2.3.4").allowed is True
    assert limiter.hit("5.6.7.8").allowed is False


def test_clear_forgets_every_address():
    limiter = AddressRateLimiter(max_attempts=1, window_seconds=60)
    for i in range(5):
        limiter.hit(f"10.0.0.{i}")

    limiter.clear()

    assert all(limiter.hit(f"10.0.0.{i}").allowed for i in range(5))


@pytest.mark.parametrize("attempts, window", [(0, 60), (5, 0)])
def test_rejects_invalid_configuration(attempts, window):
    with pytest.raises(ValueError):
        AddressRateLimiter(max_attempts=attempts, window_seconds=window)
