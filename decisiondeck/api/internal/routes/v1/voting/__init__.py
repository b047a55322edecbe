# Local application imports
from decisiondeck.api.internal.routes.v1.voting.candidate_routes import router as candidate_router
from decisiondeck.api.internal.routes.v1.voting.vote_routes import router as vote_router

__all__ = ["candidate_router", "vote_router"]
