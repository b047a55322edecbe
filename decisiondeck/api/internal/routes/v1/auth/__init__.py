# Local application imports
from decisiondeck.api.internal.routes.v1.auth.auth_routes import router as auth_router
from decisiondeck.api.internal.routes.v1.auth.user_routes import router as user_router

__all__ = ["auth_router", "user_router"]
