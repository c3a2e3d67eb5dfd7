from qaweb.api.client import ApiClient, build_async_client
from qaweb.api.models import ApiFailure, ApiOk, ApiResult, ApiTransportError

__all__ = [
    "ApiClient",
    "ApiFailure",
    "ApiOk",
    "ApiResult",
    "ApiTransportError",
    "build_async_client",
]
