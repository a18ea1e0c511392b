"""Public package exports for the WSDOT/WSF API client."""

from .async_client import AsyncWsdotClient
from .config import WsdotClientConfig
from .core.errors import ErrorKind, WsdotApiError, WsdotConfigError
from .core.models import FetchMode

__all__ = [
    "AsyncWsdotClient",
    "WsdotClientConfig",
    "WsdotApiError",
    "WsdotConfigError",
    "ErrorKind",
    "FetchMode",
]
