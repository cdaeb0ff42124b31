"""
avocado-client: async client for the Avocado relationship API.

This package provides:
- client: AvocadoClient with login handshake and every API endpoint
- rate_limit: Request quota tracking shared across calls
- models: Pydantic models for users, couples, activities and lists
- exceptions: Error hierarchy raised by the client
- config: Client settings loaded from environment variables
"""

__version__ = "0.1.0"

from avocado_client.client import AvocadoClient, filter_activities, to_epoch_seconds
from avocado_client.config import ClientSettings
from avocado_client.exceptions import (
    AuthenticationFailed,
    AvocadoError,
    ConfigurationError,
    HttpFailure,
    InvalidResponse,
    NotFound,
    RateLimitExceeded,
    TransportFailure,
)
from avocado_client.models import (
    Activity,
    ActivityType,
    AvocadoList,
    Couple,
    ListItem,
    ResponseShape,
    User,
)
from avocado_client.rate_limit import RateLimiter
from avocado_client.session import Session

__all__ = [
    # Client
    "AvocadoClient",
    "ClientSettings",
    "RateLimiter",
    "Session",
    # Models
    "Activity",
    "ActivityType",
    "AvocadoList",
    "Couple",
    "ListItem",
    "ResponseShape",
    "User",
    # Errors
    "AuthenticationFailed",
    "AvocadoError",
    "ConfigurationError",
    "HttpFailure",
    "InvalidResponse",
    "NotFound",
    "RateLimitExceeded",
    "TransportFailure",
    # Helpers
    "filter_activities",
    "to_epoch_seconds",
    # Version
    "__version__",
]
