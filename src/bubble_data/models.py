"""Record and query models for the Bubble Data API."""

import json
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Server-assigned attributes shared by every Bubble record
BASE_FIELD_NAMES: FrozenSet[str] = frozenset(
    {"created_date", "created_by", "modified_date", "id"}
)


class BubbleRecord(BaseModel):
    """Base class for typed Bubble records.

    Subclasses declare their own fields and the ``type_name`` used in the
    collection URL::

        class Task(BubbleRecord):
            type_name: ClassVar[str] = "task"

            title: Optional[str] = None
            due_date: Optional[datetime] = Field(None, alias="Due Date")

    Keys in server payloads that the subclass does not declare are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type_name: ClassVar[str] = ""

    created_date: Optional[datetime] = Field(default=None, alias="Created Date")
    created_by: Optional[str] = Field(default=None, alias="Created By")
    modified_date: Optional[datetime] = Field(default=None, alias="Modified Date")
    id: Optional[str] = Field(default=None, alias="_id")

    @classmethod
    def get_type_name(cls) -> str:
        if not cls.type_name:
            raise ValueError(f"{cls.__name__} does not declare a type_name")
        return cls.type_name

    @classmethod
    def custom_field_keys(cls) -> FrozenSet[str]:
        """Field names and aliases accepted as caller-supplied input."""
        keys = set()
        for name, info in cls.model_fields.items():
            if name in BASE_FIELD_NAMES:
                continue
            keys.add(name)
            if info.alias:
                keys.add(info.alias)
        return frozenset(keys)

    @classmethod
    def base_field_keys(cls) -> FrozenSet[str]:
        keys = set(BASE_FIELD_NAMES)
        for name in BASE_FIELD_NAMES:
            alias = cls.model_fields[name].alias
            if alias:
                keys.add(alias)
        return frozenset(keys)

    def to_payload(
        self, include_base: bool = True, only_set: bool = False
    ) -> Dict[str, Any]:
        """Serialize the record by its Bubble field names.

        Args:
            include_base: Include the server-assigned attributes
            only_set: Serialize explicitly set fields only (create payloads)

        Returns:
            JSON-ready dict of the current state. Fields that were never set
            and are still None are left out so they do not clear server data.
        """
        exclude = None if include_base else set(BASE_FIELD_NAMES)
        if only_set:
            return self.model_dump(
                mode="json", by_alias=True, exclude_unset=True, exclude=exclude
            )

        payload = self.model_dump(mode="json", by_alias=True, exclude=exclude)
        for name, info in type(self).model_fields.items():
            if name not in self.model_fields_set and getattr(self, name) is None:
                payload.pop(info.alias or name, None)
        return payload


T = TypeVar("T", bound=BubbleRecord)


class Constraint(BaseModel):
    """Search filter passed through to Bubble without local interpretation."""

    model_config = ConfigDict(extra="allow")

    key: str
    constraint_type: str
    value: Optional[Any] = None


class Sort(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sort_field: str
    descending: bool = False


class SearchConfig(BaseModel):
    """Query options for a search request. Unknown option keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    constraints: List[Constraint] = Field(default_factory=list)
    sort: Optional[Sort] = None
    cursor: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, ge=1, le=100)

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "constraints": json.dumps(
                [c.model_dump(mode="json", exclude_none=True) for c in self.constraints]
            ),
        }
        if self.sort is not None:
            params["sort_field"] = self.sort.sort_field
        params["descending"] = (
            "true" if self.sort is not None and self.sort.descending else "false"
        )
        if self.cursor is not None:
            params["cursor"] = self.cursor
        if self.limit is not None:
            params["limit"] = self.limit
        return params


class SearchPage(BaseModel, Generic[T]):
    """One page of search results."""

    results: List[T] = Field(default_factory=list)
    remaining: int = 0
    cursor: int = 0
    count: int = 0
