"""API Client Abstractions for the Bubble Data API.

All HTTP functionality is contained within dedicated API client classes.
"""

from .base_client import (
    BubbleAPIClient,
    BubbleAPIError,
    EmptyResponseError,
    MalformedRecordError,
    CreateFailedError,
    SearchFailedError,
    MissingRecordIDError,
)
from .data_client import BubbleDataClient, DataTypeRepository

__all__ = [
    # Base client
    "BubbleAPIClient",
    "BubbleAPIError",
    "EmptyResponseError",
    "MalformedRecordError",
    "CreateFailedError",
    "SearchFailedError",
    "MissingRecordIDError",
    # Data client
    "BubbleDataClient",
    "DataTypeRepository",
]
