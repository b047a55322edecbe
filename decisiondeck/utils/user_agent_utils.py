# Standard library imports
from typing import NamedTuple
import re

# Local application imports
from decisiondeck.models.voting.vote import DeviceType

_TABLET_RE = re.compile(r"tablet|ipad|playbook|silk|(android(?!.*mobile))", re.IGNORECASE)
_MOBILE_RE = re.compile(r"mobile|android|iphone|ipod|blackberry|iemobile|opera mini", re.IGNORECASE)


class ClientMetadata(NamedTuple):
    device_type: DeviceType
    browser: str
    os: str


def detect_device_type(user_agent: str) -> DeviceType:
    # Tablets first: iPad and Android tablets would otherwise match the mobile pattern
    if _TABLET_RE.search(user_agent):
        return DeviceType.TABLET
    if _MOBILE_RE.search(user_agent):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP


def detect_browser(user_agent: str) -> str:
    # Order matters: Edge and Opera also advertise Chrome, Chrome also advertises Safari
    if re.search(r"Edg(e|A|iOS)?/", user_agent):
        return "Edge"
    if re.search(r"OPR/|Opera", user_agent):
        return "Opera"
    if re.search(r"Firefox/|FxiOS/", user_agent):
        return "Firefox"
    if re.search(r"Chrome/|CriOS/", user_agent):
        return "Chrome"
    if "Safari/" in user_agent:
        return "Safari"
    return "Other"


def detect_os(user_agent: str) -> str:
    if "Windows" in user_agent:
        return "Windows"
    if re.search(r"iPhone|iPad|iPod", user_agent):
        return "iOS"
    if "Mac OS X" in user_agent or "Macintosh" in user_agent:
        return "macOS"
    if "Android" in user_agent:
        return "Android"
    if "Linux" in user_agent:
        return "Linux"
    return "Other"


def parse_user_agent(user_agent: str | None) -> ClientMetadata:
    """
    Derive device class, browser family and OS family from a User-Agent header.

    A missing header yields ``unknown``/``Other`` rather than guessing desktop.
    """
    if not user_agent:
        return ClientMetadata(DeviceType.UNKNOWN, "Other", "Other")
    return ClientMetadata(detect_device_type(user_agent), detect_browser(user_agent), detect_os(user_agent))
