"""Tests for the differential presenter -- DiffPresenter and RenderingState.

Uses the VirtualTerminal to record terminal operations and verify that only
changed lines are rewritten and that the cursor is parked where the next
pass expects it.
"""

from __future__ import annotations

from clt.console.presenter import DiffPresenter, RenderingState
from clt.console.render import Position, Render, Size
from clt.console.text import StyledText

from .virtual_terminal import VirtualTerminal


def make_presenter(rows: int = 24, cols: int = 80) -> tuple[DiffPresenter, RenderingState, VirtualTerminal]:
    terminal = VirtualTerminal(rows=rows, cols=cols)
    state = RenderingState(terminal_size=terminal.size())
    return DiffPresenter(terminal), state, terminal


# ---------------------------------------------------------------------------
# RenderingState
# ---------------------------------------------------------------------------


class TestRenderingState:
    def test_starts_with_full_render(self) -> None:
        state = RenderingState(terminal_size=Size(24, 80))
        assert state.full_render is True
        assert state.last_render == Render.EMPTY
        assert state.last_rendered_lines == 0
        assert state.last_render_cursor_pos == Position(0, 0)

    def test_changing_size_forces_full_render(self) -> None:
        state = RenderingState(terminal_size=Size(24, 80), full_render=False)
        state.terminal_size = Size(30, 100)
        assert state.full_render is True
        assert state.terminal_size == Size(30, 100)

    def test_same_size_keeps_flag(self) -> None:
        state = RenderingState(terminal_size=Size(24, 80), full_render=False)
        state.terminal_size = Size(24, 80)
        assert state.full_render is False

    def test_hidden_lines(self) -> None:
        state = RenderingState(
            terminal_size=Size(3, 80),
            last_render=Render.of(["1", "2", "3", "4"]),
            last_rendered_lines=2,
        )
        assert state.hidden_lines == 2

    def test_request_full_render(self) -> None:
        state = RenderingState(terminal_size=Size(24, 80), full_render=False)
        state.request_full_render()
        assert state.full_render is True


# ---------------------------------------------------------------------------
# Diff pass
# ---------------------------------------------------------------------------


class TestDiffRender:
    def test_first_render_writes_every_line(self) -> None:
        presenter, state, terminal = make_presenter()
        rewritten = presenter.render(Render.of(["a", "b", "c"]), state)
        assert rewritten == 3
        assert terminal.written() == ["a", "b", "c"]
        assert terminal.count("clear_eol") == 3
        assert terminal.count("clear_below") == 1
        assert state.full_render is False
        assert state.last_rendered_lines == 3

    def test_unchanged_prefix_is_skipped(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a", "b", "c"]), state)
        terminal.clear_ops()

        rewritten = presenter.render(Render.of(["a", "b", "d"]), state)

        assert rewritten == 1
        assert terminal.ops == [
            ("cursor_off",),
            ("up", 3),
            ("column", 1),
            ("down", 1),
            ("down", 1),
            ("write", "d"),
            ("clear_eol",),
            ("writeln", ""),
            ("clear_below",),
        ]

    def test_identical_frame_rewrites_nothing(self) -> None:
        presenter, state, terminal = make_presenter()
        frame = Render.of(["x", "y"])
        presenter.render(frame, state)
        terminal.clear_ops()
        assert presenter.render(frame, state) == 0
        assert terminal.written() == []

    def test_shrinking_frame_clears_below(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a", "b", "c"]), state)
        terminal.clear_ops()
        assert presenter.render(Render.of(["a"]), state) == 0
        assert terminal.ops[-1] == ("clear_below",)
        assert state.last_rendered_lines == 1

    def test_full_render_after_resize(self) -> None:
        presenter, state, terminal = make_presenter()
        frame = Render.of(["a", "b"])
        presenter.render(frame, state)
        terminal.clear_ops()

        state.terminal_size = Size(30, 80)
        assert presenter.render(frame, state) == 2
        assert terminal.written() == ["a", "b"]

    def test_lines_are_trimmed_to_width(self) -> None:
        presenter, state, terminal = make_presenter(cols=5)
        presenter.render(Render.of(["hello world"]), state)
        assert terminal.written() == ["hello"]

    def test_styled_lines_are_materialized(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render((StyledText.of("ok", foreground="green"),)), state)
        assert terminal.written() == ["\x1b[32mok\x1b[0m"]


class TestWindowing:
    def test_only_last_rows_minus_one_lines_are_shown(self) -> None:
        presenter, state, terminal = make_presenter(rows=3)
        rewritten = presenter.render(Render.of(["1", "2", "3", "4", "5"]), state)
        assert rewritten == 2
        assert terminal.written() == ["4", "5"]
        assert state.last_rendered_lines == 2
        assert state.hidden_lines == 3

    def test_scrolled_frame_diffs_against_visible_rows(self) -> None:
        presenter, state, terminal = make_presenter(rows=3)
        presenter.render(Render.of(["1", "2", "3", "4", "5"]), state)
        terminal.clear_ops()

        rewritten = presenter.render(Render.of(["1", "2", "3", "4", "6"]), state)

        assert rewritten == 1
        assert terminal.written() == ["6"]
        assert ("up", 2) in terminal.ops

    def test_zero_rows_renders_nothing(self) -> None:
        presenter, state, terminal = make_presenter(rows=1)
        assert presenter.render(Render.of(["a", "b"]), state) == 0
        assert terminal.written() == []


class TestCursorPlacement:
    def test_cursor_is_placed_and_shown(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["name: ab", "hint"], Position(0, 8)), state)
        assert terminal.ops[-3:] == [("up", 2), ("column", 9), ("cursor_on",)]
        assert terminal.cursor_visible is True

    def test_cursor_on_last_line_moves_up_one(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a", "b"], Position(1, 0)), state)
        assert terminal.ops[-3:] == [("up", 1), ("column", 1), ("cursor_on",)]

    def test_no_cursor_leaves_it_hidden(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a"]), state)
        assert terminal.cursor_visible is False

    def test_next_pass_starts_from_cursor_row(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a", "b", "c"], Position(1, 0)), state)
        terminal.clear_ops()
        presenter.render(Render.of(["a", "b", "c"]), state)
        assert terminal.ops[:3] == [("cursor_off",), ("up", 1), ("column", 1)]

    def test_render_cursor_row_advances_and_clamps(self) -> None:
        presenter, state, _ = make_presenter(rows=5)
        state.last_render_cursor_pos = Position(2, 4)
        presenter.render(Render.of(["a", "b"]), state)
        assert state.last_render_cursor_pos == Position(4, 4)
        presenter.render(Render.of(["a", "b", "c", "d", "e"]), state)
        assert state.last_render_cursor_pos == Position(5, 4)


class TestCleanAndPlainOutput:
    def test_clean_last_render(self) -> None:
        presenter, state, terminal = make_presenter()
        presenter.render(Render.of(["a", "b"]), state)
        terminal.clear_ops()
        presenter.clean_last_render(state)
        assert terminal.ops == [("up", 2), ("column", 1), ("clear_below",)]

    def test_non_interactive_writes_plain_lines(self) -> None:
        presenter, _, terminal = make_presenter()
        frame = Render((StyledText.of("done", bold=True), StyledText.of("ok")))
        presenter.render_non_interactive(frame, interactive=False)
        assert terminal.ops == [("writeln", "done"), ("writeln", "ok")]

    def test_interactive_final_render_is_styled(self) -> None:
        presenter, _, terminal = make_presenter()
        terminal.cursor_off()
        terminal.clear_ops()
        presenter.render_non_interactive(Render((StyledText.of("done", bold=True),)), interactive=True)
        assert terminal.ops == [("writeln", "\x1b[1mdone\x1b[0m"), ("cursor_on",)]
        assert terminal.cursor_visible is True
