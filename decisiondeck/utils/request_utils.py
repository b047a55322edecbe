# Third-party imports
from starlette.requests import HTTPConnection

# Local application imports
from decisiondeck.settings import settings


def get_client_address(connection: HTTPConnection) -> str:
    """
    Client address for rate limiting and vote metadata.

    ``X-Forwarded-For`` is only honoured when the deployment sits behind a
    trusted proxy (``TRUST_FORWARDED_FOR``).
    """
    if settings.TRUST_FORWARDED_FOR:
        forwarded = connection.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if connection.client and connection.client.host:
        return connection.client.host
    return "unknown"
