# Local application imports
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import DeviceType, Vote

__all__ = ["Candidate", "DeviceType", "Vote"]
