# Local application imports
from decisiondeck.settings.common import CommonSettings


class DevSettings(CommonSettings):
    DEBUG_MODE: bool = True
    DB_ECHO: bool = False
