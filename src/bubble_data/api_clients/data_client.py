"""Data API Client for Bubble record operations.

Handles create, fetch, search, paginated listing, update and delete of
typed records against a type's collection URL.
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, Union

from pydantic import ValidationError

from ..models import BubbleRecord, SearchConfig, SearchPage, T
from .base_client import (
    BubbleAPIClient,
    CreateFailedError,
    EmptyResponseError,
    MalformedRecordError,
    MissingRecordIDError,
    SearchFailedError,
)

logger = logging.getLogger(__name__)

SearchOptions = Union[SearchConfig, Mapping[str, Any], None]


def _coerce_search_config(config: SearchOptions) -> SearchConfig:
    if config is None:
        return SearchConfig()
    if isinstance(config, SearchConfig):
        return config
    return SearchConfig.model_validate(dict(config))


def _require_id(record_id: str) -> str:
    if not isinstance(record_id, str) or not record_id.strip():
        raise ValueError("Record id cannot be empty")
    return record_id.strip()


class BubbleDataClient(BubbleAPIClient):
    """Client for record operations on Bubble data types."""

    def data_type(self, record_type: Type[T]) -> "DataTypeRepository[T]":
        """Return a repository bound to one record type."""
        return DataTypeRepository(self, record_type)

    def _collection_url(self, record_type: Type[BubbleRecord]) -> str:
        return self.config.collection_url(record_type.get_type_name())

    async def get_by_id(self, record_type: Type[T], record_id: str) -> T:
        """Fetch a single record by id.

        Args:
            record_type: Record class to fetch
            record_id: Bubble unique id

        Returns:
            Populated record instance

        Raises:
            ValueError: If record_id is empty
            EmptyResponseError: If Bubble returns no record payload
            MalformedRecordError: If the payload does not validate as record_type
            httpx.HTTPStatusError: If Bubble returns an error status
        """
        record_id = _require_id(record_id)
        url = f"{self._collection_url(record_type)}/{record_id}"

        response = await self._request("GET", url)
        body = self._json_body(response)
        if not isinstance(body, dict) or not isinstance(body.get("response"), dict):
            raise EmptyResponseError(response.status_code)

        try:
            return record_type.model_validate(body["response"])
        except ValidationError as e:
            logger.error(f"Malformed {record_type.get_type_name()} {record_id}: {e}")
            raise MalformedRecordError(
                record_type.get_type_name(), response.status_code
            ) from e

    def _create_payload(
        self, record_type: Type[T], fields: Union[T, Mapping[str, Any]]
    ) -> Dict[str, Any]:
        if isinstance(fields, BubbleRecord):
            if not isinstance(fields, record_type):
                raise TypeError(
                    f"Expected {record_type.__name__}, got {type(fields).__name__}"
                )
            return fields.to_payload(include_base=False, only_set=True)

        base_keys = set(fields) & record_type.base_field_keys()
        if base_keys:
            raise ValueError(
                f"Server-assigned fields cannot be set on create: {sorted(base_keys)}"
            )
        unknown = set(fields) - record_type.custom_field_keys()
        if unknown:
            raise ValueError(
                f"Unknown fields for {record_type.__name__}: {sorted(unknown)}"
            )

        # Validate values against the declared field types
        draft = record_type.model_validate(dict(fields))
        return draft.to_payload(include_base=False, only_set=True)

    async def create(
        self, record_type: Type[T], fields: Union[T, Mapping[str, Any]]
    ) -> str:
        """Create a new record, returning the id Bubble assigned.

        Args:
            record_type: Record class to create
            fields: Declared field values, as a mapping or a draft record

        Returns:
            New record id

        Raises:
            ValueError: If fields contain unknown or server-assigned keys
            pydantic.ValidationError: If a field value has the wrong type
            EmptyResponseError: If Bubble returns no body
            CreateFailedError: If Bubble does not report success with an id
            httpx.HTTPStatusError: If Bubble returns an error status
        """
        payload = self._create_payload(record_type, fields)
        url = f"{self._collection_url(record_type)}/"

        response = await self._request("POST", url, json=payload)
        body = self._json_body(response)
        if not isinstance(body, dict):
            raise EmptyResponseError(response.status_code)

        status = body.get("status")
        new_id = body.get("id")
        if status != "success" or not new_id:
            logger.error(f"Create of {record_type.get_type_name()} returned {status}")
            raise CreateFailedError(status, response.status_code)

        logger.debug(f"Created {record_type.get_type_name()} {new_id}")
        return str(new_id)

    async def search(
        self, record_type: Type[T], config: SearchOptions = None
    ) -> SearchPage[T]:
        """Fetch one page of records matching the search options.

        Args:
            record_type: Record class to search
            config: Constraints, sort, cursor and limit

        Returns:
            Page with results in server order and the remaining count

        Raises:
            ValueError: If config contains unknown or invalid options
            SearchFailedError: If the response lacks the result payload
            MalformedRecordError: If the page does not validate as record_type
            httpx.HTTPStatusError: If Bubble returns an error status
        """
        search_config = _coerce_search_config(config)
        url = self._collection_url(record_type)

        response = await self._request(
            "GET", url, params=search_config.to_query_params()
        )
        body = self._json_body(response)
        if not isinstance(body, dict) or not isinstance(body.get("response"), dict):
            raise SearchFailedError(response.status_code)

        try:
            return SearchPage[record_type].model_validate(body["response"])  # type: ignore[valid-type]
        except ValidationError as e:
            logger.error(f"Malformed search page for {record_type.get_type_name()}: {e}")
            raise MalformedRecordError(
                record_type.get_type_name(), response.status_code
            ) from e

    def _paging_config(self, config: SearchOptions) -> SearchConfig:
        search_config = _coerce_search_config(config)
        if search_config.cursor is not None:
            raise ValueError("cursor is managed internally and cannot be supplied")
        return search_config

    async def get_all(self, record_type: Type[T], config: SearchOptions = None) -> List[T]:
        """Page through search results and return every matching record.

        Pages are requested one at a time, in cursor order, until Bubble
        reports nothing remaining. Any failure aborts the whole call.
        """
        search_config = self._paging_config(config)

        cursor = 0
        results: List[T] = []
        while True:
            page = await self.search(
                record_type, search_config.model_copy(update={"cursor": cursor})
            )
            results.extend(page.results)
            if page.remaining <= 0:
                break
            cursor += 1

        logger.debug(
            f"Fetched {len(results)} {record_type.get_type_name()} records "
            f"in {cursor + 1} pages"
        )
        return results

    async def get_one(
        self, record_type: Type[T], config: SearchOptions = None
    ) -> Optional[T]:
        """Return the first record matching the search, or None."""
        page = await self.search(record_type, self._paging_config(config))
        return page.results[0] if page.results else None

    async def save(self, record: BubbleRecord) -> None:
        """Write the record's current state back to Bubble.

        Raises:
            MissingRecordIDError: If the record has no id or a blank one
                (no request is made)
            httpx.HTTPStatusError: If Bubble returns an error status
        """
        if not record.id or not record.id.strip():
            raise MissingRecordIDError(
                f"Cannot call save on a {type(record).__name__} without an id value."
            )

        url = f"{self._collection_url(type(record))}/{record.id}"
        await self._request("PATCH", url, json=record.to_payload())

    async def delete(self, record_type: Type[BubbleRecord], record_id: str) -> None:
        """Delete a record by id."""
        record_id = _require_id(record_id)
        url = f"{self._collection_url(record_type)}/{record_id}"
        await self._request("DELETE", url)
        logger.debug(f"Deleted {record_type.get_type_name()} {record_id}")


class DataTypeRepository(Generic[T]):
    """Record operations bound to a single record type."""

    def __init__(self, client: BubbleDataClient, record_type: Type[T]):
        # Fail fast on types without a collection name
        record_type.get_type_name()
        self.client = client
        self.record_type = record_type

    async def get_by_id(self, record_id: str) -> T:
        """Fetch a single record by id. See BubbleDataClient.get_by_id."""
        return await self.client.get_by_id(self.record_type, record_id)

    async def create(self, fields: Union[T, Mapping[str, Any]]) -> str:
        """Create a record and return its new id. See BubbleDataClient.create."""
        return await self.client.create(self.record_type, fields)

    async def search(self, config: SearchOptions = None) -> SearchPage[T]:
        """Fetch one page of matching records."""
        return await self.client.search(self.record_type, config)

    async def get_all(self, config: SearchOptions = None) -> List[T]:
        """Fetch every matching record, one page at a time."""
        return await self.client.get_all(self.record_type, config)

    async def get_one(self, config: SearchOptions = None) -> Optional[T]:
        """Return the first matching record, or None."""
        return await self.client.get_one(self.record_type, config)

    async def save(self, record: T) -> None:
        """Write a record of the bound type back to Bubble.

        Raises:
            TypeError: If record is not an instance of the bound type
            MissingRecordIDError: If the record has no id or a blank one
        """
        if not isinstance(record, self.record_type):
            raise TypeError(
                f"Expected {self.record_type.__name__}, got {type(record).__name__}"
            )
        await self.client.save(record)

    async def delete(self, record_id: str) -> None:
        """Delete a record by id."""
        await self.client.delete(self.record_type, record_id)
