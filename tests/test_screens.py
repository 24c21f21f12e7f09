"""Tests that run the app headless and drive it with Textual's pilot.

The repository is the in-memory FakeRepository, so loads and writes run
in real workers without a server.
"""

import asyncio
from pathlib import Path

from rich.text import Text
from textual.pilot import Pilot
from textual.widgets import OptionList

from cubicle.app import CubicleApp
from cubicle.config import Settings
from cubicle.dnd import DroppableKind
from cubicle.services import SessionService
from cubicle.ui.screens import BoardPickerScreen, BoardScreen
from cubicle.ui.widgets import ConfirmModal, KanbanColumn, TaskCard
from cubicle.ui.widgets.column import CardList
from cubicle.ui.widgets.task_card import _label_color

from conftest import FakeRepository, board_payload

SIZE = (120, 40)


def make_app(tmp_path: Path, repo: FakeRepository, board_id: str | None = "b1") -> CubicleApp:
    """App with a stored session, so it skips the login screen."""
    session_file = tmp_path / "session.yml"
    SessionService(session_file).save("token", {"name": "Ada", "email": "ada@example.com"})
    return CubicleApp(Settings(board_id=board_id, session_file=session_file), repository=repo)


async def settle(pilot: Pilot) -> None:
    """Let background loads, renders and writes finish."""
    for _ in range(4):
        await pilot.app.workers.wait_for_complete()
        await pilot.pause()


class TestBoardRendering:
    """Tests for drawing a loaded board."""

    def test_columns_and_cards(self, tmp_path: Path):
        """Columns appear in server order with one card per task."""
        app = make_app(tmp_path, FakeRepository())

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                screen = pilot.app.screen
                assert isinstance(screen, BoardScreen)

                columns = screen.column_widgets
                assert [c.column_id for c in columns] == ["todo", "doing", "done"]
                assert [c.task_count for c in columns] == [3, 1, 0]
                assert [len(c.cards) for c in columns] == [3, 1, 0]
                assert [card.task.id for card in columns[0].cards] == ["t1", "t2", "t3"]
                assert screen.sub_title == "Website redesign"

        asyncio.run(scenario())

    def test_markup_in_server_text_is_shown_literally(self, tmp_path: Path):
        """Brackets in titles, labels and names are text, not markup."""
        payload = board_payload()
        payload["columns"][1]["title"] = "[bold]Backlog"
        t1 = payload["tasks"][1]
        t1["title"] = "Fix [/] in parser"
        t1["labels"] = [{"text": "a[/b]", "color": "not a colour"}]
        t1["assignedTo"] = [{"_id": "u9", "name": "[red]Eve"}]
        app = make_app(tmp_path, FakeRepository(payload))

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                screen = pilot.app.screen
                assert isinstance(screen, BoardScreen)

                card = screen.query_one("#task-t1", TaskCard)
                assert card.task.title == "Fix [/] in parser"
                assert Text.from_markup(card._format_labels()).plain == "#a[/b]"
                assert Text.from_markup(card._format_assignees()).plain == "@[red]Eve"

                column = screen.query_one("#column-todo", KanbanColumn)
                assert Text.from_markup(column._header_text).plain == "[bold]Backlog (3)"

        asyncio.run(scenario())

    def test_unknown_label_colour_falls_back(self):
        assert _label_color("purple") == "purple"
        assert _label_color("#ff8800") == "#ff8800"
        assert _label_color("not a colour") == "blue"


class TestDragAndDrop:
    """Tests for mouse drags on the board."""

    def test_drag_card_to_another_column(self, tmp_path: Path):
        """Press on a card, drag it over Done, release: the task moves and is persisted."""
        repo = FakeRepository()
        app = make_app(tmp_path, repo)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                repo.calls.clear()

                await pilot.mouse_down("#task-t1", offset=(3, 1))
                await pilot.hover("#column-done", offset=(5, 6))
                await pilot.mouse_up("#column-done", offset=(5, 6))
                await settle(pilot)

                layout = pilot.app.store.state.layout()
                assert layout["todo"] == ["t2", "t3"]
                assert layout["done"] == ["t1"]
                assert repo.calls_to("move_task") == [("t1", "done", 0)]

                done = pilot.app.screen.query_one("#column-done", KanbanColumn)
                assert [card.task.id for card in done.cards] == ["t1"]

        asyncio.run(scenario())

    def test_click_without_drag_does_not_move(self, tmp_path: Path):
        repo = FakeRepository()
        app = make_app(tmp_path, repo)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                repo.calls.clear()

                await pilot.mouse_down("#task-t2", offset=(3, 1))
                await pilot.mouse_up("#task-t2", offset=(3, 1))
                await settle(pilot)

                assert pilot.app.store.state.layout()["todo"] == ["t1", "t2", "t3"]
                assert repo.calls_to("move_task") == []
                assert pilot.app.screen.get_current_task().id == "t2"

        asyncio.run(scenario())

    def test_droppables_are_clipped_to_visible_cards(self, tmp_path: Path):
        """Cards scrolled out of a long column are not drop targets."""
        payload = board_payload()
        payload["tasks"] = [
            {"_id": f"t{i}", "title": f"Task {i}", "columnId": "todo", "boardId": "b1", "position": i}
            for i in range(20)
        ]
        app = make_app(tmp_path, FakeRepository(payload))

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                screen = pilot.app.screen
                assert isinstance(screen, BoardScreen)

                column = screen.query_one("#column-todo", KanbanColumn)
                assert column.task_count == 20
                visible = column.query_one(CardList).content_region

                cards = [d for d in screen.droppables() if d.kind == DroppableKind.TASK]
                assert 0 < len(cards) < 20
                for target in cards:
                    assert target.column_id == "todo"
                    assert visible.x <= target.rect.x and target.rect.right <= visible.right
                    assert visible.y <= target.rect.y and target.rect.bottom <= visible.bottom

        asyncio.run(scenario())


class TestBoardPicker:
    """Tests for the board list."""

    def test_lists_boards(self, tmp_path: Path):
        repo = FakeRepository()
        app = make_app(tmp_path, repo, board_id=None)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                screen = pilot.app.screen
                assert isinstance(screen, BoardPickerScreen)
                assert screen.query_one("#boards", OptionList).option_count == 1
                assert screen.highlighted_board.id == "b1"

        asyncio.run(scenario())

    def test_delete_board_after_confirmation(self, tmp_path: Path):
        """d asks first; y deletes the board and reloads the list."""
        repo = FakeRepository()
        app = make_app(tmp_path, repo, board_id=None)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                repo.calls.clear()

                await pilot.press("d")
                await pilot.pause()
                assert isinstance(pilot.app.screen, ConfirmModal)

                await pilot.press("y")
                await settle(pilot)

                assert isinstance(pilot.app.screen, BoardPickerScreen)
                assert repo.calls_to("delete_board") == [("b1",)]
                assert len(repo.calls_to("list_boards")) == 1

        asyncio.run(scenario())

    def test_delete_board_cancelled(self, tmp_path: Path):
        repo = FakeRepository()
        app = make_app(tmp_path, repo, board_id=None)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)

                await pilot.press("d")
                await pilot.pause()
                await pilot.press("n")
                await settle(pilot)

                assert isinstance(pilot.app.screen, BoardPickerScreen)
                assert repo.calls_to("delete_board") == []

        asyncio.run(scenario())

    def test_delete_board_failure_keeps_list(self, tmp_path: Path):
        repo = FakeRepository()
        repo.failing.add("delete_board")
        app = make_app(tmp_path, repo, board_id=None)

        async def scenario():
            async with app.run_test(size=SIZE) as pilot:
                await settle(pilot)
                repo.calls.clear()

                await pilot.press("d")
                await pilot.pause()
                await pilot.press("y")
                await settle(pilot)

                assert repo.calls_to("delete_board") == [("b1",)]
                assert repo.calls_to("list_boards") == []
                assert pilot.app.screen.query_one("#boards", OptionList).option_count == 1

        asyncio.run(scenario())
