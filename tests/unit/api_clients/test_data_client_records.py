"""Tests for BubbleDataClient single-record operations.

Runs against the in-process Bubble Data API; requests recorded by the
server double as the transport spy.
"""

from datetime import datetime, timezone

import httpx
import pytest
from pydantic import ValidationError

from bubble_data.api_clients.base_client import (
    CreateFailedError,
    EmptyResponseError,
    MalformedRecordError,
    MissingRecordIDError,
)

from tests.infrastructure.sample_records import Note, Task, Untyped


class TestGetByID:
    @pytest.mark.asyncio
    async def test_returns_record_with_requested_id(self, data_client, fake_server):
        record_id = fake_server.add_record("task", title="Ship it", priority=2)

        task = await data_client.get_by_id(Task, record_id)

        assert isinstance(task, Task)
        assert task.id == record_id
        assert task.title == "Ship it"
        assert task.priority == 2
        assert task.created_date is not None

    @pytest.mark.asyncio
    async def test_requests_versioned_collection_url(self, data_client, fake_server):
        record_id = fake_server.add_record("note", body="x")

        await data_client.get_by_id(Note, record_id)

        request = fake_server.requests[0]
        assert request.method == "GET"
        assert request.path == f"/version-test/api/1.1/obj/note/{record_id}"

    @pytest.mark.asyncio
    async def test_empty_body_raises(self, data_client, fake_server):
        fake_server.simulate_failure("GET", status_code=200, content=b"")

        with pytest.raises(EmptyResponseError, match="no body"):
            await data_client.get_by_id(Task, "1700000000000x1")

    @pytest.mark.asyncio
    async def test_body_without_response_payload_raises(self, data_client, fake_server):
        fake_server.simulate_failure("GET", status_code=200, content=b"{}")

        with pytest.raises(EmptyResponseError):
            await data_client.get_by_id(Task, "1700000000000x1")

    @pytest.mark.asyncio
    async def test_mistyped_payload_raises_malformed_record(
        self, data_client, fake_server
    ):
        record_id = fake_server.add_record("task", priority="not-a-number")

        with pytest.raises(MalformedRecordError, match="task") as exc_info:
            await data_client.get_by_id(Task, record_id)
        assert isinstance(exc_info.value.__cause__, ValidationError)

    @pytest.mark.asyncio
    async def test_missing_record_propagates_http_error(self, data_client):
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await data_client.get_by_id(Task, "1700000000000x404")
        assert exc_info.value.response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_id_rejected_without_request(self, data_client, fake_server):
        with pytest.raises(ValueError):
            await data_client.get_by_id(Task, "  ")
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_type_without_type_name_rejected(self, data_client, fake_server):
        with pytest.raises(ValueError, match="type_name"):
            await data_client.get_by_id(Untyped, "1700000000000x1")
        assert fake_server.requests == []


class TestCreate:
    @pytest.mark.asyncio
    async def test_returns_new_id_and_round_trips_fields(self, data_client, fake_server):
        due = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)

        new_id = await data_client.create(
            Task, {"title": "Draft", "priority": 1, "Due Date": due, "tags": ["a"]}
        )
        fetched = await data_client.get_by_id(Task, new_id)

        assert fetched.id == new_id
        assert fetched.title == "Draft"
        assert fetched.priority == 1
        assert fetched.due_date == due
        assert fetched.tags == ["a"]

    @pytest.mark.asyncio
    async def test_posts_to_collection_with_trailing_slash(self, data_client, fake_server):
        await data_client.create(Note, {"body": "hello"})

        request = fake_server.requests_for("POST")[0]
        assert request.path == "/version-test/api/1.1/obj/note/"
        assert request.body == {"body": "hello"}

    @pytest.mark.asyncio
    async def test_accepts_python_field_names(self, data_client, fake_server):
        due = datetime(2024, 6, 1, tzinfo=timezone.utc)

        await data_client.create(Task, {"due_date": due})

        assert fake_server.requests_for("POST")[0].body == {
            "Due Date": "2024-06-01T00:00:00Z"
        }

    @pytest.mark.asyncio
    async def test_accepts_draft_record(self, data_client, fake_server):
        new_id = await data_client.create(Task, Task(title="From draft", id="ignored"))

        assert new_id != "ignored"
        assert fake_server.requests_for("POST")[0].body == {"title": "From draft"}

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected_without_request(
        self, data_client, fake_server
    ):
        with pytest.raises(ValueError, match="Unknown fields"):
            await data_client.create(Task, {"title": "x", "colour": "red"})
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_server_assigned_fields_rejected(self, data_client, fake_server):
        with pytest.raises(ValueError, match="Server-assigned"):
            await data_client.create(Task, {"title": "x", "_id": "mine"})
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_wrongly_typed_value_rejected(self, data_client, fake_server):
        with pytest.raises(ValidationError):
            await data_client.create(Task, {"priority": "urgent"})
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_draft_of_other_type_rejected(self, data_client):
        with pytest.raises(TypeError):
            await data_client.create(Task, Note(body="wrong type"))

    @pytest.mark.asyncio
    async def test_non_success_status_raises_with_status(self, data_client, fake_server):
        fake_server.create_status = "NOT_RUN"

        with pytest.raises(CreateFailedError) as exc_info:
            await data_client.create(Note, {"body": "x"})

        assert "NOT_RUN" in str(exc_info.value)
        assert exc_info.value.status == "NOT_RUN"

    @pytest.mark.asyncio
    async def test_success_without_id_raises(self, data_client, fake_server):
        fake_server.simulate_failure(
            "POST", status_code=200, content=b'{"status": "success"}'
        )

        with pytest.raises(CreateFailedError, match="success"):
            await data_client.create(Note, {"body": "x"})

    @pytest.mark.asyncio
    async def test_empty_body_raises(self, data_client, fake_server):
        fake_server.simulate_failure("POST", status_code=200, content=b"")

        with pytest.raises(EmptyResponseError):
            await data_client.create(Note, {"body": "x"})


class TestSave:
    @pytest.mark.asyncio
    async def test_without_id_raises_before_any_request(self, data_client, fake_server):
        with pytest.raises(MissingRecordIDError, match="without an id"):
            await data_client.save(Task(title="unsaved"))
        assert len(fake_server.requests) == 0

    @pytest.mark.asyncio
    async def test_blank_id_raises_before_any_request(self, data_client, fake_server):
        with pytest.raises(MissingRecordIDError):
            await data_client.save(Task(id="   ", title="blank"))
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_sends_in_place_changes_to_defaulted_fields(
        self, data_client, fake_server
    ):
        # Stored without tags, so the fetched record keeps the default list
        record_id = fake_server.add_record("task", title="Old")
        task = await data_client.get_by_id(Task, record_id)

        task.tags.append("urgent")
        await data_client.save(task)

        assert fake_server.requests_for("PATCH")[0].body["tags"] == ["urgent"]
        assert fake_server.find("task", record_id)["tags"] == ["urgent"]
        assert (await data_client.get_by_id(Task, record_id)).tags == ["urgent"]

    @pytest.mark.asyncio
    async def test_patches_full_instance_state(self, data_client, fake_server):
        record_id = fake_server.add_record("task", title="Old", status="open")
        task = await data_client.get_by_id(Task, record_id)

        task.title = "New"
        result = await data_client.save(task)

        assert result is None
        request = fake_server.requests_for("PATCH")[0]
        assert request.path == f"/version-test/api/1.1/obj/task/{record_id}"
        assert request.body["_id"] == record_id
        assert request.body["title"] == "New"
        assert request.body["status"] == "open"
        assert "Created Date" in request.body
        assert fake_server.find("task", record_id)["title"] == "New"

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, data_client):
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await data_client.save(Task(id="1700000000000x404", title="gone"))
        assert exc_info.value.response.status_code == 404


class TestDelete:
    @pytest.mark.asyncio
    async def test_removes_record(self, data_client, fake_server):
        record_id = fake_server.add_record("note", body="bye")

        await data_client.delete(Note, record_id)

        assert fake_server.find("note", record_id) is None
        assert fake_server.requests_for("DELETE")[0].path.endswith(f"/note/{record_id}")

    @pytest.mark.asyncio
    async def test_empty_id_rejected(self, data_client, fake_server):
        with pytest.raises(ValueError):
            await data_client.delete(Note, "")
        assert fake_server.requests == []
