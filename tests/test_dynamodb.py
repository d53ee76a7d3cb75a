import uuid

import pytest
from botocore.stub import ANY
from conftest import TABLE, StepClock

from todo_web.dynamodb import DynamoDBRepository, entity_to_item, item_to_entity
from todo_web.errors import BackendBadResponseError, BackendUnavailableError
from todo_web.schemas import TodoCreate


def item(todo_id, text, epoch):
    return {"Id": {"S": todo_id}, "Text": {"S": text}, "CreatedAtEpoch": {"N": str(epoch)}}


@pytest.fixture
def dynamo_repo(dynamodb):
    client, _ = dynamodb
    return DynamoDBRepository(client, TABLE, clock=StepClock())


class TestItemMapping:
    def test_entity_to_item_uses_table_attribute_names(self):
        entity = {"id": "abc", "text": "Buy milk", "created_at_epoch": 1_700_000_000}
        assert entity_to_item(entity) == item("abc", "Buy milk", 1_700_000_000)

    def test_item_to_entity(self):
        assert item_to_entity(item("abc", "Buy milk", 1_700_000_000)) == {
            "id": "abc",
            "text": "Buy milk",
            "created_at_epoch": 1_700_000_000,
        }

    @pytest.mark.parametrize(
        "raw",
        [
            {"Id": {"S": "abc"}, "CreatedAtEpoch": {"N": "1"}},
            {"Id": {"S": "abc"}, "Text": {"S": "x"}, "CreatedAtEpoch": {"S": "1"}},
            {"Id": {"S": "abc"}, "Text": {"S": "x"}, "CreatedAtEpoch": {"N": "1.5"}},
        ],
    )
    def test_malformed_item(self, raw):
        with pytest.raises(BackendBadResponseError):
            item_to_entity(raw)


class TestDynamoDBRepository:
    def test_list_follows_pagination_and_sorts_newest_first(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        last_key = {"Id": {"S": "b"}, "CreatedAtEpoch": {"N": "300"}}
        stubber.add_response(
            "scan",
            {"Items": [item("a", "first", 100), item("b", "third", 300)], "LastEvaluatedKey": last_key},
            {"TableName": TABLE},
        )
        stubber.add_response(
            "scan",
            {"Items": [item("c", "second", 200)]},
            {"TableName": TABLE, "ExclusiveStartKey": last_key},
        )

        todos = dynamo_repo.list_todos()

        assert [t.id for t in todos] == ["b", "c", "a"]
        assert [t.created_at_epoch for t in todos] == [300, 200, 100]
        stubber.assert_no_pending_responses()

    def test_list_empty_table(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_response("scan", {"Items": []}, {"TableName": TABLE})
        assert dynamo_repo.list_todos() == []

    def test_list_backend_failure(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_client_error(
            "scan",
            service_error_code="ProvisionedThroughputExceededException",
            service_message="Rate exceeded",
            http_status_code=400,
        )
        with pytest.raises(BackendUnavailableError, match="failed to get todos"):
            dynamo_repo.list_todos()

    def test_list_malformed_item(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_response("scan", {"Items": [{"Id": {"S": "a"}}]}, {"TableName": TABLE})
        with pytest.raises(BackendBadResponseError):
            dynamo_repo.list_todos()

    def test_create_puts_item(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_response("put_item", {}, {"TableName": TABLE, "Item": ANY})

        created = dynamo_repo.create(TodoCreate(text="Walk the dog"))

        uuid.UUID(created["id"])
        assert created["text"] == "Walk the dog"
        assert created["created_at_epoch"] == 1_700_000_000
        stubber.assert_no_pending_responses()

    def test_create_backend_failure(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_client_error("put_item", service_error_code="AccessDeniedException", http_status_code=400)
        with pytest.raises(BackendUnavailableError, match="failed to add todo"):
            dynamo_repo.create(TodoCreate(text="Denied"))

    def test_delete_uses_composite_key(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_response(
            "delete_item",
            {},
            {
                "TableName": TABLE,
                "Key": {"Id": {"S": "abc"}, "CreatedAtEpoch": {"N": "1700000000"}},
            },
        )
        dynamo_repo.delete("abc", 1_700_000_000)
        stubber.assert_no_pending_responses()

    def test_delete_backend_failure(self, dynamodb, dynamo_repo):
        _, stubber = dynamodb
        stubber.add_client_error("delete_item", service_error_code="InternalServerError", http_status_code=500)
        with pytest.raises(BackendUnavailableError, match="failed to delete todo"):
            dynamo_repo.delete("abc", 1)
