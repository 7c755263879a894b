"""
Bubble Data - typed async client for the Bubble.io Data API.

Declare record classes by subclassing BubbleRecord, then create, fetch,
search, page through and update them with BubbleDataClient.
"""

from .config import BubbleConfig, ConfigurationError
from .models import BubbleRecord, Constraint, Sort, SearchConfig, SearchPage
from .api_clients import (
    BubbleAPIError,
    BubbleDataClient,
    CreateFailedError,
    DataTypeRepository,
    EmptyResponseError,
    MalformedRecordError,
    MissingRecordIDError,
    SearchFailedError,
)

__version__ = "0.1.0"

__all__ = [
    "BubbleConfig",
    "ConfigurationError",
    "BubbleRecord",
    "Constraint",
    "Sort",
    "SearchConfig",
    "SearchPage",
    "BubbleDataClient",
    "DataTypeRepository",
    "BubbleAPIError",
    "EmptyResponseError",
    "MalformedRecordError",
    "CreateFailedError",
    "SearchFailedError",
    "MissingRecordIDError",
]
