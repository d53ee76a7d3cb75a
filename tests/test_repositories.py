import re
import uuid
from datetime import datetime

from conftest import StepClock

from todo_web.repositories import InMemoryRepository, format_epoch
from todo_web.schemas import TodoCreate


def test_format_epoch_uses_local_time():
    epoch = 1_678_886_400
    formatted = format_epoch(epoch)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", formatted)
    assert formatted == datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M:%S")


class TestInMemoryRepository:
    def test_create_then_list_includes_todo_once(self, repo):
        created = repo.create(TodoCreate(text="Read book"))
        todos = repo.list_todos()
        matching = [t for t in todos if t.id == created["id"]]
        assert len(matching) == 1
        assert matching[0].text == "Read book"
        assert matching[0].created_at_epoch > 0
        assert matching[0].created_at_formatted == format_epoch(matching[0].created_at_epoch)

    def test_create_generates_uuid_and_timestamp(self):
        repo = InMemoryRepository(clock=lambda: 1_700_000_123.9)
        created = repo.create(TodoCreate(text="Stamp me"))
        uuid.UUID(created["id"])
        assert created["created_at_epoch"] == 1_700_000_123

    def test_ids_are_unique(self, repo):
        ids = {repo.create(TodoCreate(text="same text"))["id"] for _ in range(20)}
        assert len(ids) == 20

    def test_list_is_newest_first(self, repo):
        for i in range(5):
            repo.create(TodoCreate(text=f"Task {i}"))
        todos = repo.list_todos()
        epochs = [t.created_at_epoch for t in todos]
        assert epochs == sorted(epochs, reverse=True)
        assert [t.text for t in todos] == [f"Task {i}" for i in reversed(range(5))]

    def test_delete_removes_todo(self, repo):
        keep = repo.create(TodoCreate(text="Keep"))
        gone = repo.create(TodoCreate(text="Gone"))
        repo.delete(gone["id"], gone["created_at_epoch"])
        assert [t.id for t in repo.list_todos()] == [keep["id"]]

    def test_delete_needs_matching_timestamp(self, repo):
        todo = repo.create(TodoCreate(text="Composite key"))
        repo.delete(todo["id"], todo["created_at_epoch"] + 1)
        assert [t.id for t in repo.list_todos()] == [todo["id"]]

    def test_delete_missing_is_a_no_op(self, repo):
        todo = repo.create(TodoCreate(text="Still here"))
        before = repo.list_todos()
        repo.delete("does-not-exist", 42)
        assert repo.list_todos() == before
        assert before[0].id == todo["id"]

    def test_list_returns_copies(self):
        repo = InMemoryRepository(clock=StepClock())
        repo.create(TodoCreate(text="Original"))
        listed = list(repo._scan())
        listed[0]["text"] = "Mutated"
        assert repo.list_todos()[0].text == "Original"
