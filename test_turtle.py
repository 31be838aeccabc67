import math

import pytest

from lindenmayer import (
    Cursor,
    Custom,
    DeterministicExpander,
    DrawTo,
    EmptyCursorStackError,
    MoveForward,
    MoveForwardAndSave,
    MoveTo,
    NoOp,
    PopCursor,
    PopHeading,
    PopPosition,
    PushCursor,
    PushHeading,
    PushPosition,
    Rotate,
    Segment,
    SetHeading,
    TurtleInterpreter,
    Unknown,
    interpret,
    segments_to_polylines,
)
from lindenmayer.turtle import Action

ACTIONS: dict[str, Action] = {
    "F": MoveForwardAndSave(10),
    "f": MoveForward(10),
    "+": Rotate(90),
    "-": Rotate(-90),
    "[": PushCursor(),
    "]": PopCursor(),
}


class TestCursor:
    def test_defaults(self) -> None:
        c = Cursor()
        assert c.position == (0.0, 0.0)
        assert c.heading == (1.0, 0.0)

    def test_heading_normalized(self) -> None:
        c = Cursor((1, 2), (0, 5))
        assert c.heading == pytest.approx((0.0, 1.0))
        assert c.position == (1.0, 2.0)

    def test_zero_heading(self) -> None:
        with pytest.raises(ValueError):
            Cursor((0, 0), (0, 0))

    def test_rotate_is_counter_clockwise(self) -> None:
        c = Cursor().rotate_degrees(90)
        assert c.heading == pytest.approx((0.0, 1.0), abs=1e-12)
        assert c.angle == pytest.approx(90)

    def test_at(self) -> None:
        c = Cursor.at(3, 4, 180)
        assert c.position == (3.0, 4.0)
        assert c.heading == pytest.approx((-1.0, 0.0), abs=1e-12)

    def test_forward(self) -> None:
        c = Cursor.at(0, 0, 90).forward(2.5)
        assert c.position == pytest.approx((0.0, 2.5), abs=1e-12)


class TestInterpreter:
    def test_forward_draw(self) -> None:
        result = interpret("F", ACTIONS)
        assert result.segments == [Segment((0.0, 0.0), (10.0, 0.0))]
        assert result.cursor.position == (10.0, 0.0)

    def test_forward_move_records_nothing(self) -> None:
        result = interpret("ff", ACTIONS)
        assert result.segments == []
        assert result.cursor.position == (20.0, 0.0)

    def test_rotate(self) -> None:
        result = interpret("+F", ACTIONS)
        end = result.segments[0].end
        assert end == pytest.approx((0.0, 10.0), abs=1e-9)

    def test_branching(self) -> None:
        result = interpret("F[+F]F", ACTIONS)
        assert len(result.segments) == 3
        assert result.segments[1].start == pytest.approx((10.0, 0.0))
        assert result.segments[1].end == pytest.approx((10.0, 10.0), abs=1e-9)
        assert result.segments[2].start == pytest.approx((10.0, 0.0), abs=1e-9)
        assert result.segments[2].end == pytest.approx((20.0, 0.0), abs=1e-9)

    def test_push_pop_restores_cursor(self) -> None:
        start = Cursor.at(5, -3, 30)
        assert interpret("[]", ACTIONS, start).cursor == start
        assert interpret("[+f-F]", ACTIONS, start).cursor == start

    def test_pop_empty_stack(self) -> None:
        with pytest.raises(EmptyCursorStackError) as excinfo:
            interpret("F]", ACTIONS)
        assert excinfo.value.stack == "cursor"
        assert excinfo.value.symbol == "]"
        assert isinstance(excinfo.value, IndexError)

    def test_unmatched_pop_after_balanced(self) -> None:
        with pytest.raises(EmptyCursorStackError):
            interpret("[F]]", ACTIONS)

    def test_unknown_symbols_are_noops(self) -> None:
        result = interpret("XYZ", ACTIONS)
        assert result.segments == []
        assert result.cursor == Cursor()

    def test_no_drawing_actions(self) -> None:
        result = interpret("f+f", ACTIONS)
        assert result.segments == []
        assert result.cursor.position == pytest.approx((10.0, 10.0), abs=1e-9)

    def test_step_reports_actions(self) -> None:
        interp = TurtleInterpreter("F?X", {**ACTIONS, "X": Custom("leaf")})
        assert interp.step() == MoveForwardAndSave(10)
        assert interp.step() == Unknown()
        assert interp.step() == Custom("leaf")
        assert interp.step() is None
        assert interp.step() is None

    def test_iterating_yields_actions(self) -> None:
        interp = TurtleInterpreter("F+", ACTIONS)
        assert list(interp) == [MoveForwardAndSave(10), Rotate(90)]

    def test_move_to_and_draw_to(self) -> None:
        actions: dict[str, Action] = {"M": MoveTo((3.0, 4.0)), "D": DrawTo((6.0, 8.0))}
        result = interpret("MD", actions)
        assert result.segments == [Segment((3.0, 4.0), (6.0, 8.0))]
        assert result.cursor.position == (6.0, 8.0)

    def test_set_heading(self) -> None:
        result = interpret("HF", {**ACTIONS, "H": SetHeading((0.0, -2.0))})
        assert result.segments[0].end == pytest.approx((0.0, -10.0))

    def test_set_heading_zero(self) -> None:
        with pytest.raises(ValueError):
            SetHeading((0.0, 0.0))

    def test_rotate_from_radians(self) -> None:
        assert Rotate.from_radians(math.pi / 2).degrees == pytest.approx(90)

    def test_position_stack_keeps_heading(self) -> None:
        actions: dict[str, Action] = {**ACTIONS, "(": PushPosition(), ")": PopPosition()}
        result = interpret("(F+)", actions)
        assert result.cursor.position == (0.0, 0.0)
        assert result.cursor.heading == pytest.approx((0.0, 1.0), abs=1e-12)

    def test_heading_stack_keeps_position(self) -> None:
        actions: dict[str, Action] = {**ACTIONS, "<": PushHeading(), ">": PopHeading()}
        result = interpret("<+F>", actions)
        assert result.cursor.position == pytest.approx((0.0, 10.0), abs=1e-9)
        assert result.cursor.heading == pytest.approx((1.0, 0.0), abs=1e-12)

    @pytest.mark.parametrize(
        "action, stack", [(PopPosition(), "position"), (PopHeading(), "heading")]
    )
    def test_other_empty_stacks(self, action: Action, stack: str) -> None:
        with pytest.raises(EmptyCursorStackError) as excinfo:
            interpret("P", {"P": action})
        assert excinfo.value.stack == stack

    def test_noop(self) -> None:
        assert interpret("N", {"N": NoOp()}).cursor == Cursor()

    def test_unsupported_action(self) -> None:
        with pytest.raises(TypeError):
            interpret("Q", {"Q": "forward"})  # type: ignore[dict-item]

    def test_fed_from_expander(self) -> None:
        expander = DeterministicExpander("X", {"X": "F[X][+FX]-FX"}, 4)
        actions: dict[str, Action] = {
            **ACTIONS,
            "+": Rotate(-25),
            "-": Rotate(25),
            "X": NoOp(),
        }
        start = Cursor.at(0, -200, 90)
        result = interpret(expander, actions, start)
        assert len(result.segments) == "".join(expander).count("F")
        # The trunk ends on "-FX", away from the start.
        assert result.cursor != start


class TestPolylines:
    def test_chains_connected_segments(self) -> None:
        result = interpret("F[+F]F", ACTIONS)
        polylines = segments_to_polylines(result.segments)
        assert len(polylines) == 2
        assert len(polylines[0]) == 3
        assert polylines[1][0] == pytest.approx((10.0, 0.0))

    def test_empty(self) -> None:
        assert segments_to_polylines([]) == []
