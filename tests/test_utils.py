# Standard library imports
from datetime import UTC, datetime
import logging

# Third-party imports
import pytest

# Local application imports
from decisiondeck.core.monitoring.logging import get_logger
from decisiondeck.models import DeviceType
from decisiondeck.utils.stats_utils import average, bucket_counts, hour_of_day_counts, share
from decisiondeck.utils.user_agent_utils import parse_user_agent

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
EDGE_WINDOWS = CHROME_WINDOWS + " Edg/120.0.0.0"
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
SAFARI_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_1) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.1 Safari/605.1.15"
)
IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.0 Mobile/15E148 Safari/604.1"
)
ANDROID_PHONE = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Mobile Safari/537.36"
)


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        (CHROME_WINDOWS, (DeviceType.DESKTOP, "Chrome", "Windows")),
        (EDGE_WINDOWS, (DeviceType.DESKTOP, "Edge", "Windows")),
        (FIREFOX_LINUX, (DeviceType.DESKTOP, "Firefox", "Linux")),
        (SAFARI_MAC, (DeviceType.DESKTOP, "Safari", "macOS")),
        (IPAD, (DeviceType.TABLET, "Safari", "iOS")),
        (ANDROID_PHONE, (DeviceType.MOBILE, "Chrome", "Android")),
    ],
)
def test_parse_user_agent(user_agent, expected):
    assert tuple(parse_user_agent(user_agent)) == expected


@pytest.mark.parametrize("user_agent", [None, ""])
def test_missing_user_agent(user_agent):
    assert tuple(parse_user_agent(user_agent)) == (DeviceType.UNKNOWN, "Other", "Other")


def test_share():
    assert share(1, 3) == 33.33
    assert share(2, 3) == 66.67
    assert share(5, 0) == 0.0


def test_average():
    assert average(3, 2) == 1.5
    assert average(3, 0) == 0.0


def test_bucket_counts_treat_naive_values_as_utc():
    stamps = [
        datetime(2024, 5, 1, 9, 30),
        datetime(2024, 5, 1, 23, 59, tzinfo=UTC),
        datetime(2024, 5, 2, 0, 1, tzinfo=UTC),
    ]

    assert bucket_counts(stamps) == [("2024-05-01", 2), ("2024-05-02", 1)]
    assert bucket_counts(stamps, "%Y-%m-%d-%H") == [
        ("2024-05-01-09", 1),
        ("2024-05-01-23", 1),
        ("2024-05-02-00", 1),
    ]
    assert hour_of_day_counts(stamps) == [(0, 1), (9, 1), (23, 1)]


def _handlers_reached(logger: logging.Logger) -> list[logging.Handler]:
    handlers = []
    current: logging.Logger | None = logger
    while current is not None:
        handlers.extend(current.handlers)
        if not current.propagate:
            break
        current = current.parent
    return handlers


def test_module_loggers_print_each_record_once():
    get_logger("decisiondeck")
    module_logger = get_logger("decisiondeck.services.voting.ledger_services")
    get_logger("decisiondeck.services.voting.ledger_services", logging.DEBUG)

    assert module_logger.handlers == []
    assert len(_handlers_reached(module_logger)) == 1
    assert len(_handlers_reached(get_logger("decisiondeck"))) == 1


def test_loggers_outside_the_package_get_their_own_handler():
    logger = get_logger("decisiondeck_scripts_check")

    assert len(_handlers_reached(logger)) == 1
