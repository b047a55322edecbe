# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from decisiondeck.api.internal.routes.v1.analytics import analytics_router
from decisiondeck.api.internal.routes.v1.auth import auth_router, user_router
from decisiondeck.api.internal.routes.v1.realtime import realtime_router
from decisiondeck.api.internal.routes.v1.voting import candidate_router, vote_router
from decisiondeck.dependancies.common import api_rate_limit

router = APIRouter()

# HTTP routers share the general per-address limit
http_router = APIRouter(dependencies=[Depends(api_rate_limit)])
http_router.include_router(auth_router)
http_router.include_router(user_router)
http_router.include_router(candidate_router)
http_router.include_router(vote_router)
http_router.include_router(analytics_router)

# Include all internal v1 routers
router.include_router(http_router)
router.include_router(realtime_router)
