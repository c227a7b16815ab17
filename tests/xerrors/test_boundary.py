"""Tests for boundary helpers."""

import logging
from unittest.mock import MagicMock

import pytest

from xerrors.boundary import ensure_classified, handle
from xerrors.config import ErrorsConfig, set_config
from xerrors.errors import XError, cause, fail, wrap


class TestEnsureClassified:

    def test_none(self):
        assert ensure_classified(None) is None

    def test_classified_error_returned_unchanged(self):
        err = fail(404, "not found")
        assert ensure_classified(err) is err

    def test_plain_error_gets_internal_defaults(self):
        root = ValueError("boom")
        err = ensure_classified(root)

        assert isinstance(err, XError)
        assert (err.code, err.message) == (500, "internal error")
        assert str(err) == "boom"
        assert cause(err) is root
        assert 'File "' in format(err, "+v")

    def test_explicit_code_and_message(self):
        err = ensure_classified(ValueError("boom"), code=503, message="try later")
        assert (err.code, err.message) == (503, "try later")

    def test_defaults_come_from_config(self):
        set_config(ErrorsConfig(internal_code=599, internal_message="unexpected"))
        err = ensure_classified(RuntimeError("x"))
        assert (err.code, err.message) == (599, "unexpected")

    def test_unclassified_xerror_keeps_raw_trace(self):
        """No "<Error 0>" context is folded in for unclassified errors."""
        root = ValueError("boom")
        unclassified = wrap(root, "load")
        err = ensure_classified(unclassified)

        assert err is not unclassified
        assert err.code == 500
        assert str(err) == "load: boom"
        assert "<Error 0>" not in format(err, "+v")
        assert cause(err) is root

    def test_untraced_unclassified_xerror(self):
        err = ensure_classified(XError())
        assert (err.code, err.trace) == (500, None)


class TestHandle:

    def test_no_exception_passes_through(self):
        with handle("copy %s", "a.txt"):
            result = 1 + 1
        assert result == 2

    def test_wraps_plain_exception(self):
        root = OSError("disk full")
        with pytest.raises(XError) as exc_info:
            with handle("copy %s %s", "a.txt", "b.txt"):
                raise root

        err = exc_info.value
        assert str(err) == "copy a.txt b.txt: disk full"
        assert err.code == 0
        assert err.__cause__ is root
        assert cause(err) is root

    def test_classifies_with_code(self):
        with pytest.raises(XError) as exc_info:
            with handle("payment for %s", "order-9", code=402):
                raise ValueError("card declined")

        err = exc_info.value
        assert (err.code, err.message) == (402, "payment for order-9")
        assert str(err) == "card declined"

    def test_classified_error_annotated_in_place(self):
        original = fail(404, "not found")
        with pytest.raises(XError) as exc_info:
            with handle("lookup user"):
                raise original

        assert exc_info.value is original
        assert str(original) == "lookup user"
        assert original.code == 404

    def test_code_nests_inner_classification(self):
        with pytest.raises(XError) as exc_info:
            with handle("render page", code=500):
                raise fail(404, "not found")

        err = exc_info.value
        assert err.code == 500
        assert "<Error 404>: not found" in format(err, "+v")

    def test_works_as_decorator(self):
        @handle("parse %s", "settings")
        def parse():
            raise KeyError("port")

        with pytest.raises(XError, match="parse settings"):
            parse()
        # each call gets a fresh handler
        with pytest.raises(XError, match="parse settings"):
            parse()

    def test_base_exceptions_pass_through(self):
        with pytest.raises(KeyboardInterrupt):
            with handle("interruptible"):
                raise KeyboardInterrupt()

    def test_logs_once_with_classification(self):
        logger = MagicMock()
        with pytest.raises(XError):
            with handle("charge %s", "card", code=402, logger=logger):
                raise ValueError("declined")

        logger.log.assert_called_once()
        args, kwargs = logger.log.call_args
        assert args == (logging.ERROR, "charge card")
        assert kwargs["extra"]["error_code"] == 402
        assert kwargs["extra"]["error_message"] == "charge card"
        assert isinstance(kwargs["exc_info"], XError)
