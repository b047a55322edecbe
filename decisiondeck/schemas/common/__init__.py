# Local application imports
from decisiondeck.schemas.common.response_schemas import BaseResponse, CamelModel, ErrorDetails, MessageResponse

__all__ = ["BaseResponse", "CamelModel", "ErrorDetails", "MessageResponse"]
