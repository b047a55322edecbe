# Local application imports
from decisiondeck.api.internal.routes.v1.realtime.ws_routes import router as realtime_router

__all__ = ["realtime_router"]
