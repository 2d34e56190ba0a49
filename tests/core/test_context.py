"""Tests for faultline.core.context module."""

from types import MappingProxyType

import pytest

from faultline.core.combinators import run
from faultline.core.context import (
    ContextFrame,
    WrappedError,
    annotate,
    render_message,
    unwrap_chain,
)
from faultline.core.errors import InvalidOutcomeShape, ProgrammingError
from faultline.core.result import Err, Ok
from faultline.core.stacktrace import CallSite, CallSiteResolver


def fail_lookup():
    raise LookupError("no such user")


class TestAnnotate:
    """Test annotate."""

    def test_ok_passes_through(self):
        """Successes are returned unchanged."""
        success = Ok(5)
        assert annotate(success, "label", {"k": 1}) is success

    def test_label_and_metadata(self):
        """A failure gets one frame with label and metadata."""
        result = annotate(Err("db_timeout"), "fetching user", {"user_id": 123})
        unwrapped = unwrap_chain(result)
        assert len(unwrapped.frames) == 1
        frame = unwrapped.frames[0]
        assert frame.label == "fetching user"
        assert dict(frame.metadata) == {"user_id": 123}
        assert unwrapped.reason == "db_timeout"
        assert unwrapped.result == Err("db_timeout")

    def test_metadata_only_mapping(self):
        """A mapping in label position is metadata."""
        frame = annotate(Err("x"), {"order_id": 7}).reason.frame
        assert frame.label is None
        assert dict(frame.metadata) == {"order_id": 7}

    def test_metadata_only_pairs(self):
        """A list of pairs in label position is metadata."""
        frame = annotate(Err("x"), [("order_id", 7), ("step", 2)]).reason.frame
        assert frame.label is None
        assert list(frame.metadata) == ["order_id", "step"]

    def test_neither(self):
        """Annotating with nothing still adds a frame."""
        frame = annotate(Err("x")).reason.frame
        assert frame.label is None
        assert dict(frame.metadata) == {}

    def test_non_string_label(self):
        """Non-string labels are converted with str()."""
        assert annotate(Err("x"), 42).reason.frame.label == "42"

    def test_empty_label_is_absent(self):
        """An empty label is stored as no label."""
        assert annotate(Err("x"), "").reason.frame.label is None

    def test_metadata_is_read_only(self):
        """Frame metadata cannot be mutated."""
        frame = annotate(Err("x"), "a", {"k": 1}).reason.frame
        assert isinstance(frame.metadata, MappingProxyType)
        with pytest.raises(TypeError):
            frame.metadata["k"] = 2

    def test_call_site_is_caller(self):
        """The frame points at the line that called annotate."""
        frame = annotate(Err("x"), "a").reason.frame
        assert frame.call_site.file.endswith("test_context.py")
        assert frame.stack[0].module.startswith("faultline") is False

    def test_explicit_resolver(self):
        """An injected resolver picks the call site."""
        resolver = CallSiteResolver(owning_component="no_such_component")
        frame = annotate(Err("x"), "a", resolver=resolver).reason.frame
        assert frame.call_site.file.endswith("test_context.py")

    def test_invalid_outcome(self):
        """Non-outcomes raise."""
        with pytest.raises(InvalidOutcomeShape):
            annotate("oops", "label")

    def test_nested_frames_outermost_first(self):
        """Later annotations come first."""
        result = annotate(annotate(Err("F"), "a"), "b")
        assert [f.label for f in unwrap_chain(result).frames] == ["b", "a"]

    def test_deep_chain_is_iterative(self):
        """Very deep chains do not hit the recursion limit."""
        result = Err("root")
        for i in range(3000):
            result = Err(WrappedError(ContextFrame(label=str(i)), result))
        unwrapped = unwrap_chain(result)
        assert len(unwrapped.frames) == 3000
        assert unwrapped.frames[0].label == "2999"
        assert unwrapped.reason == "root"


class TestUnwrapChain:
    """Test unwrap_chain."""

    def test_accepts_wrapped_error(self):
        """A WrappedError works as well as Err(WrappedError)."""
        chain = annotate(Err("x"), "a").reason
        assert unwrap_chain(chain).reason == "x"

    def test_plain_err(self):
        """An un-annotated Err has no frames."""
        assert unwrap_chain(Err("x")) == ((), Err("x"))

    def test_raised_terminal(self):
        """A chain from run ends in the raised exception."""
        unwrapped = unwrap_chain(annotate(run(fail_lookup), "loading"))
        assert unwrapped.raised is True
        assert isinstance(unwrapped.result, LookupError)
        assert [f.label for f in unwrapped.frames] == ["loading", None]

    def test_rejects_other_values(self):
        """Ok and other values are not chains."""
        with pytest.raises(ProgrammingError):
            unwrap_chain(Ok(1))


class TestRenderMessage:
    """Test render_message and WrappedError string forms."""

    def test_lines(self):
        """Terminal message then one context line per frame."""
        frame_a = ContextFrame(label="a", metadata={"z": 1, "b": 2}, call_site=CallSite("app.py", 3))
        frame_b = ContextFrame(label="b")
        chain = WrappedError(frame_b, Err(WrappedError(frame_a, Err("timeout"))))
        assert render_message(chain) == (
            "timeout\n"
            "    [CONTEXT] b\n"
            "    [CONTEXT] app.py:3: a {'b': 2, 'z': 1}"
        )

    def test_missing_line(self):
        """A call site without a line shows only the file."""
        frame = ContextFrame(call_site=CallSite("app.py"))
        assert frame.render_line() == "    [CONTEXT] app.py:"

    def test_callback_frame(self):
        """Frames from safe combinators show the callback."""
        chain = run(fail_lookup).reason
        line = render_message(chain).splitlines()[1]
        assert f"&{fail_lookup.__module__}.fail_lookup/0" in line
        assert render_message(chain).splitlines()[0] == "LookupError: no such user"

    def test_str_is_render_message(self):
        """str() of a chain is its rendered message."""
        chain = annotate(Err("x"), "a").reason
        assert str(chain) == render_message(chain)

    def test_repr(self):
        """repr lists labels outermost first and the terminal message."""
        chain = annotate(annotate(Err("timeout"), "a"), "b").reason
        assert repr(chain) == "WrappedError<<b => a | timeout>>"

    def test_to_dict(self):
        """to_dict gives message and contexts."""
        chain = annotate(Err("timeout"), "a", {"id": 1}).reason
        assert chain.to_dict() == {
            "message": "timeout",
            "contexts": [{"label": "a", "metadata": {"id": 1}}],
        }

    def test_bare_err_terminal(self):
        """A bare Err renders as Err()."""
        assert render_message(annotate(Err(), "a")).splitlines()[0] == "Err()"
