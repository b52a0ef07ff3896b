import io
import logging

import pytest

from escapetime import app
from escapetime.log import ConsoleHandler, DropThirdPartyFilter, configure_logging


def test_parse_args_defaults_leave_config_untouched():
    args = app.parse_args([])
    overrides = app.config_overrides(args)
    assert all(value is None for value in overrides.values())
    assert args.window is True
    assert args.verbose is False


def test_parse_args_overrides():
    args = app.parse_args([
        "--width", "64", "--height", "48", "--center-re", "-0.75", "--center-im", "0.1",
        "--scale", "0.002", "--max-iterations", "500", "--escape-radius-squared", "16",
        "--evaluator", "cosine", "--palette", "Cosine", "--no-smooth", "--workers", "3",
        "--no-window", "-v",
    ])
    overrides = app.config_overrides(args)
    assert overrides == {
        "width": 64,
        "height": 48,
        "center_re": -0.75,
        "center_im": 0.1,
        "scale": 0.002,
        "max_iterations": 500,
        "escape_radius_squared": 16.0,
        "evaluator": "cosine",
        "palette": "Cosine",
        "smooth": False,
        "workers": 3,
    }
    assert args.window is False
    assert args.verbose is True


def test_parse_args_rejects_unknown_evaluator():
    with pytest.raises(SystemExit):
        app.parse_args(["--evaluator", "julia"])


def test_main_renders_without_window(monkeypatch):
    shown = []
    monkeypatch.setattr(app, "show", lambda *a, **k: shown.append(a))
    status = app.main(["--width", "8", "--height", "6", "--max-iterations", "20",
                       "--workers", "2", "--no-window"])
    assert status == 0
    assert shown == []


def test_main_shows_buffer(monkeypatch):
    shown = []
    monkeypatch.setattr(app, "show", lambda rgba, title: shown.append(rgba.shape))
    assert app.main(["--width", "8", "--height", "6", "--max-iterations", "20"]) == 0
    assert shown == [(6, 8, 4)]


def test_main_reports_invalid_configuration(monkeypatch, caplog):
    monkeypatch.setattr(app, "show", lambda *a, **k: pytest.fail("must not render"))
    status = app.main(["--width", "0", "--no-window"])
    assert status == 2
    assert "Invalid configuration" in caplog.text


def test_main_rejects_iteration_cap_beyond_int32(monkeypatch, caplog):
    monkeypatch.setattr(app, "show", lambda *a, **k: pytest.fail("must not render"))
    status = app.main(["--width", "8", "--height", "6", "--max-iterations", "2147483648",
                       "--no-window"])
    assert status == 2
    assert "Invalid configuration" in caplog.text


def test_configure_logging_replaces_its_own_handler():
    root = logging.getLogger()
    first = configure_logging(stream=io.StringIO())
    second = configure_logging(stream=io.StringIO())
    try:
        ours = [h for h in root.handlers if isinstance(h, ConsoleHandler)]
        assert ours == [second]
        assert first not in root.handlers
    finally:
        root.removeHandler(second)


def test_log_filter_drops_third_party_records():
    stream = io.StringIO()
    handler = configure_logging(verbose=True, stream=stream)
    try:
        logging.getLogger("numba.core.ssa").debug("noise")
        logging.getLogger("escapetime.test").debug("signal")
    finally:
        logging.getLogger().removeHandler(handler)
    output = stream.getvalue()
    assert "[DEBUG] signal" in output
    assert "noise" not in output


def test_filter_prefix_matching():
    f = DropThirdPartyFilter(("numba",))
    assert not f.filter(logging.LogRecord("numba", logging.INFO, "", 0, "", None, None))
    assert not f.filter(logging.LogRecord("numba.core", logging.INFO, "", 0, "", None, None))
    assert f.filter(logging.LogRecord("numbakit", logging.INFO, "", 0, "", None, None))
