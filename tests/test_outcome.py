"""
Tests for the ParseOutcome algebra: Success and Failure.
"""

from combparse import Failure, PosNote, Success


class TestMapping:
    """Test that map_value and map_failure only touch their own side."""

    def test_map_value_on_success(self):
        """Test the value is transformed and the remaining input kept."""
        assert Success(1, "rest").map_value(lambda v: v + 1) == Success(2, "rest")

    def test_map_value_skips_failure(self):
        """Test the function is never called on a failure."""
        calls = []
        outcome = Failure("boom").map_value(calls.append)
        assert outcome == Failure("boom")
        assert calls == []

    def test_map_failure_on_failure(self):
        """Test the message is transformed."""
        outcome = Failure("boom", "abc").map_failure(lambda msg: "context: " + msg)
        assert outcome == Failure("context: boom")
        assert outcome.remaining == "abc"

    def test_map_failure_skips_success(self):
        """Test a success passes through unchanged."""
        success = Success("v", "")
        assert success.map_failure(lambda msg: "never") is success


class TestFlatMapping:
    """Test sequencing and recovery on outcomes."""

    def test_flat_map_success_receives_value_and_remaining(self):
        """Test the next step sees both the value and the rest of the input."""
        outcome = Success(1, "rest").flat_map_success(lambda v, r: Success((v, r), ""))
        assert outcome == Success((1, "rest"), "")

    def test_flat_map_success_short_circuits(self):
        """Test failures propagate untouched."""
        failure = Failure("stop", "xyz")
        assert failure.flat_map_success(lambda v, r: Success(v, r)) is failure

    def test_flat_map_failure_recovers(self):
        """Test a failure can be replaced by an alternative outcome."""
        outcome = Failure("first").flat_map_failure(lambda msg: Success(msg, ""))
        assert outcome == Success("first", "")

    def test_flat_map_failure_skips_success(self):
        """Test a success is not replaced."""
        success = Success(1, "")
        assert success.flat_map_failure(lambda msg: Failure("never")) is success

    def test_flat_map_either(self):
        """Test dispatch to the matching side."""
        on_success = lambda v, r: Success(("ok", v), r)
        on_failure = lambda msg: Success(("recovered", msg), "")
        assert Success(1, "r").flat_map_either(on_success, on_failure) == Success(("ok", 1), "r")
        assert Failure("m").flat_map_either(on_success, on_failure) == Success(("recovered", "m"), "")


class TestEqualityAndTruthiness:
    """Test how outcomes compare in assertions."""

    def test_success_equality(self):
        """Test values and remaining input both matter."""
        assert Success(1, "a") == Success(1, "a")
        assert Success(1, "a") != Success(1, "b")
        assert Success(1, "a") != Success(2, "a")

    def test_failure_equality_uses_message_only(self):
        """Test where a failure happened doesn't take part in equality."""
        assert Failure("x", "abc") == Failure("x", "")
        assert Failure("x") != Failure("y")
        assert Failure("x") != Success("x", "")

    def test_truthiness(self):
        """Test successes are truthy and failures falsy."""
        assert Success(None, "")
        assert not Failure("nope")

    def test_repr(self):
        """Test outcomes print readably."""
        assert repr(Success([1], "")) == "Success([1], '')"
        assert repr(Failure("Exhausted input")) == "Failure('Exhausted input')"


class TestFailureHelpers:
    """Test the failure-only helpers used by the combinators."""

    def test_annotate_prefixes_and_records_note(self):
        """Test a label is prefixed and a note added."""
        failure = Failure("inner", "c").annotate("outer", 3)
        assert failure.message == "outer: inner"
        assert failure.remaining == "c"
        assert failure.notes == (PosNote(3, "outer"),)

    def test_deeper_prefers_less_remaining_input(self):
        """Test the failure that got further wins, the first one on a tie."""
        shallow = Failure("shallow", "abc")
        deep = Failure("deep", "c")
        assert shallow.deeper(deep) is deep
        assert deep.deeper(shallow) is deep
        tie = Failure("tie", "abc")
        assert shallow.deeper(tie) is shallow


class TestParseError:
    """Test converting failures into exceptions."""

    def test_error_position(self):
        """Test the position is recovered from the remaining input."""
        error = Failure("boom", "c").error("abc")
        assert error.pos == 2
        assert str(error) == "boom"
        assert error.__notes__ == ["At position 2 (line 1, column 3)\nabc\n  ^"]

    def test_error_on_second_line(self):
        """Test line and column are counted from the last newline."""
        error = Failure("boom", "d").error("ab\ncd")
        assert error.__notes__ == ["At position 4 (line 2, column 2)\ncd\n ^"]

    def test_error_includes_named_notes(self):
        """Test notes from name() are rendered outermost first."""
        failure = Failure("boom", "").annotate("inner", 1).annotate("outer", 3)
        error = failure.error("xyz")
        assert error.__notes__[0].startswith("At position 3 (line 1, column 4)")
        assert error.__notes__[1].startswith("outer\nAt position 0 (line 1, column 1)")
        assert error.__notes__[2].startswith("inner\nAt position 2 (line 1, column 3)")
