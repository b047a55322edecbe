# Local application imports
from decisiondeck.api.internal.routes.v1.analytics.analytics_routes import router as analytics_router

__all__ = ["analytics_router"]
