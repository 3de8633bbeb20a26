"""Tests for termglobe.cli module.

Covers:
- Argument parsing (modes, defaults, validation errors)
- Palette validation and Unicode fallback
- Scene construction from templates and texture files
- Key and mouse dispatch per mode
- Logging configuration
- Smoke tests: main() and _display_loop() with curses mocked
"""

from __future__ import annotations

import curses
import io
import logging
from unittest import mock

import pytest

from termglobe import __version__
from termglobe.cli import (
    DEFAULT_REFRESH_RATE,
    DEFAULT_ZOOM,
    DRAG_SENSITIVITY,
    LOG_ENV,
    PAN_STEP,
    SPIN_STEP,
    ZOOM_STEP,
    CLIConfig,
    Mode,
    _configure_logging,
    _display_loop,
    _validate_palette,
    build_controller,
    choose_palette,
    compute_frame_sleep,
    handle_key,
    handle_mouse,
    main,
    parse_args,
)
from termglobe.globe import SphereTemplate
from termglobe.input import MouseAction
from termglobe.palettes import get_palette
from termglobe.palettes.base import Palette


# ---------------------------------------------------------------------------
# parse_args
# ---------------------------------------------------------------------------

class TestParseArgs:
    def test_defaults(self) -> None:
        config = parse_args([])
        assert config.mode is Mode.SCREENSAVER
        assert config.refresh_rate == DEFAULT_REFRESH_RATE
        assert config.cam_zoom == DEFAULT_ZOOM
        assert config.globe_rotation == 0.0
        assert config.cam_rotation == 0.0
        assert config.focus_speed == 1.0
        assert config.night is False
        assert config.template == "earth"
        assert config.palette is None
        assert config.location == pytest.approx((18.0, -36.0))

    @pytest.mark.parametrize("flag, mode", [
        ("-i", Mode.INTERACTIVE),
        ("--interactive", Mode.INTERACTIVE),
        ("-s", Mode.SCREENSAVER),
        ("-p", Mode.LISTING),
        ("--pipe", Mode.LISTING),
    ])
    def test_modes(self, flag: str, mode: Mode) -> None:
        assert parse_args([flag]).mode is mode

    def test_modes_exclusive(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["-i", "-p"])
        assert exc_info.value.code == 2

    def test_numeric_flags(self) -> None:
        config = parse_args(["-r", "30", "-g", "12.5", "-c", "-4", "-z", "3", "-f", "2"])
        assert config.refresh_rate == 30
        assert config.globe_rotation == 12.5
        assert config.cam_rotation == -4.0
        assert config.cam_zoom == 3.0
        assert config.focus_speed == 2.0

    def test_location(self) -> None:
        assert parse_args(["-l", "0.5,0.5"]).location == pytest.approx((0.0, 0.0))

    @pytest.mark.parametrize("value", ["0.5", "2,0.5", "a,b", "0.1,0.2;0.3,0.4"])
    def test_bad_location(self, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["-l", value])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("args", [["-r", "0"], ["-f", "0"], ["-f", "-1"]])
    def test_non_positive_rates(self, args) -> None:
        with pytest.raises(SystemExit):
            parse_args(args)

    def test_night_and_textures(self) -> None:
        config = parse_args(["-n", "--texture", "day.txt", "--texture-night", "night.txt"])
        assert config.night is True
        assert config.texture == "day.txt"
        assert config.texture_night == "night.txt"

    def test_unknown_template(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["-t", "mars"])

    def test_palette(self) -> None:
        assert parse_args(["--palette", "ascii"]).palette == "ascii"

    def test_logging_flags(self) -> None:
        config = parse_args(["-v", "--log-file", "/tmp/globe.log"])
        assert config.verbose is True
        assert config.log_file == "/tmp/globe.log"

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestValidatePalette:
    def test_known(self) -> None:
        assert _validate_palette("classic") == "classic"

    def test_unknown_exits_with_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _validate_palette("neon")
        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "neon" in err
        assert "classic" in err


class TestChoosePalette:
    def test_template_default(self) -> None:
        with mock.patch("termglobe.cli.detect_unicode_support", return_value=True):
            assert choose_palette(CLIConfig()) == SphereTemplate.EARTH.default_palette

    def test_explicit(self) -> None:
        assert choose_palette(CLIConfig(palette="ascii")) == "ascii"

    def test_unicode_fallback(self) -> None:
        with mock.patch("termglobe.cli.detect_unicode_support", return_value=False):
            assert choose_palette(CLIConfig(palette="blocks")) == "ascii"

    def test_unicode_kept_when_supported(self) -> None:
        with mock.patch("termglobe.cli.detect_unicode_support", return_value=True):
            assert choose_palette(CLIConfig(palette="blocks")) == "blocks"


# ---------------------------------------------------------------------------
# build_controller
# ---------------------------------------------------------------------------

class TestBuildController:
    def test_template_scene(self) -> None:
        config = CLIConfig(globe_rotation=10.0, cam_rotation=5.0, cam_zoom=3.0,
                           location=(20.0, 30.0), night=True)
        ctrl = build_controller(config, get_palette("classic").ramp)
        assert ctrl.globe.template is SphereTemplate.EARTH
        assert ctrl.globe.spin_speed == 10.0
        assert ctrl.globe.night_mode is True
        assert ctrl.camera.focus == (20.0, 30.0)
        assert ctrl.camera.distance == 3.0
        assert ctrl.camera.orbit_speed == 5.0

    def test_texture_files(self, tmp_path) -> None:
        day = tmp_path / "day.txt"
        night = tmp_path / "night.txt"
        day.write_text("@@ \n @@\n")
        night.write_text("  .\n.  \n")
        ctrl = build_controller(
            CLIConfig(texture=str(day), texture_night=str(night)), " .@"
        )
        assert ctrl.globe.template is None
        assert ctrl.globe.day.size == (3, 2)
        assert ctrl.globe.day.rows[0] == (1.0, 1.0, 0.0)
        assert ctrl.globe.night is not None

    def test_custom_day_without_night(self, tmp_path) -> None:
        day = tmp_path / "day.txt"
        day.write_text("@ @\n")
        ctrl = build_controller(CLIConfig(texture=str(day)), " @")
        assert ctrl.globe.night is None

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(OSError):
            build_controller(CLIConfig(texture=str(tmp_path / "nope.txt")), " @")


# ---------------------------------------------------------------------------
# Key / mouse dispatch
# ---------------------------------------------------------------------------

@pytest.fixture
def controller():
    return build_controller(CLIConfig(location=(0.0, 0.0)), " .:-=+*#%@")


class TestHandleKeyInteractive:
    def test_no_key(self, controller) -> None:
        assert handle_key(-1, Mode.INTERACTIVE, controller) is True

    @pytest.mark.parametrize("key", [ord("q"), ord("Q"), 27])
    def test_quit(self, controller, key: int) -> None:
        assert handle_key(key, Mode.INTERACTIVE, controller) is False

    def test_spin(self, controller) -> None:
        handle_key(ord("+"), Mode.INTERACTIVE, controller)
        handle_key(ord("+"), Mode.INTERACTIVE, controller)
        handle_key(ord("-"), Mode.INTERACTIVE, controller)
        assert controller.globe.spin_speed == pytest.approx(SPIN_STEP)

    def test_orbit(self, controller) -> None:
        handle_key(ord("."), Mode.INTERACTIVE, controller)
        assert controller.camera.target_orbit_speed > 0.0
        handle_key(ord(","), Mode.INTERACTIVE, controller)
        handle_key(ord(","), Mode.INTERACTIVE, controller)
        assert controller.camera.target_orbit_speed < 0.0

    def test_night_toggle(self, controller) -> None:
        handle_key(ord("n"), Mode.INTERACTIVE, controller)
        assert controller.globe.night_mode is True

    @pytest.mark.parametrize("key, expected", [
        (ord("h"), (0.0, -PAN_STEP)),
        (curses.KEY_LEFT, (0.0, -PAN_STEP)),
        (ord("l"), (0.0, PAN_STEP)),
        (curses.KEY_RIGHT, (0.0, PAN_STEP)),
        (ord("k"), (PAN_STEP, 0.0)),
        (curses.KEY_UP, (PAN_STEP, 0.0)),
        (ord("j"), (-PAN_STEP, 0.0)),
        (curses.KEY_DOWN, (-PAN_STEP, 0.0)),
    ])
    def test_pan(self, controller, key: int, expected) -> None:
        handle_key(key, Mode.INTERACTIVE, controller)
        assert controller.camera.focus == pytest.approx(expected)

    def test_zoom(self, controller) -> None:
        start = controller.camera.target_distance
        handle_key(curses.KEY_PPAGE, Mode.INTERACTIVE, controller)
        assert controller.camera.target_distance == pytest.approx(start - ZOOM_STEP)
        handle_key(curses.KEY_NPAGE, Mode.INTERACTIVE, controller)
        assert controller.camera.target_distance == pytest.approx(start)

    def test_enter_refocuses_home(self, controller) -> None:
        controller.pan(10.0, 10.0)
        handle_key(10, Mode.INTERACTIVE, controller, home=(0.0, 0.0))
        assert controller.camera.target_focus == (0.0, 0.0)
        assert controller.camera.focus == (10.0, 10.0)

    def test_enter_accounts_for_spin(self, controller) -> None:
        controller.globe.spin = 25.0
        handle_key(curses.KEY_ENTER, Mode.INTERACTIVE, controller, home=(5.0, 60.0))
        assert controller.camera.target_focus == pytest.approx((5.0, 35.0))

    def test_unknown_key_ignored(self, controller) -> None:
        assert handle_key(ord("x"), Mode.INTERACTIVE, controller) is True

    def test_resize_not_a_keypress(self, controller) -> None:
        assert handle_key(curses.KEY_RESIZE, Mode.SCREENSAVER, controller) is True


class TestHandleKeyOtherModes:
    def test_screensaver_any_key_exits(self, controller) -> None:
        assert handle_key(ord("x"), Mode.SCREENSAVER, controller) is False

    def test_listing_skips(self, controller) -> None:
        controller.play([(0.0, 10.0), (0.0, 20.0)])
        assert handle_key(ord(" "), Mode.LISTING, controller) is True
        assert controller.camera.target_focus == (0.0, 20.0)
        # nothing left to skip to
        assert handle_key(ord(" "), Mode.LISTING, controller) is False

    def test_listing_quit(self, controller) -> None:
        controller.play([(0.0, 10.0), (0.0, 20.0)])
        assert handle_key(ord("q"), Mode.LISTING, controller) is False


class TestHandleMouse:
    def test_drag_pans_with_pointer(self, controller) -> None:
        handle_mouse(MouseAction.DRAG_MOVE, 1, 0, controller)
        assert controller.camera.focus == pytest.approx((0.0, -DRAG_SENSITIVITY))
        handle_mouse(MouseAction.DRAG_MOVE, 0, 1, controller)
        assert controller.camera.focus == pytest.approx((DRAG_SENSITIVITY, -DRAG_SENSITIVITY))

    def test_drag_end_ignored(self, controller) -> None:
        handle_mouse(MouseAction.DRAG_END, 3, 3, controller)
        assert controller.camera.focus == (0.0, 0.0)

    def test_scroll_zooms(self, controller) -> None:
        start = controller.camera.target_distance
        handle_mouse(MouseAction.SCROLL_UP, 0, 0, controller)
        assert controller.camera.target_distance < start
        handle_mouse(MouseAction.SCROLL_DOWN, 0, 0, controller)
        assert controller.camera.target_distance == pytest.approx(start)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

class TestConfigureLogging:
    def test_default_warning(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_ENV, raising=False)
        with mock.patch("termglobe.cli.logging.basicConfig") as basic:
            _configure_logging()
        assert basic.call_args.kwargs["level"] == logging.WARNING

    def test_verbose(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_ENV, raising=False)
        with mock.patch("termglobe.cli.logging.basicConfig") as basic:
            _configure_logging(verbose=True)
        assert basic.call_args.kwargs["level"] == logging.DEBUG

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_ENV, "info")
        with mock.patch("termglobe.cli.logging.basicConfig") as basic:
            _configure_logging()
        assert basic.call_args.kwargs["level"] == logging.INFO

    def test_log_file(self) -> None:
        with mock.patch("termglobe.cli.logging.basicConfig") as basic:
            _configure_logging(log_file="/tmp/globe.log")
        assert basic.call_args.kwargs["filename"] == "/tmp/globe.log"
        assert "stream" not in basic.call_args.kwargs


# ---------------------------------------------------------------------------
# Frame timing
# ---------------------------------------------------------------------------

class TestComputeFrameSleep:
    def test_remaining_time(self) -> None:
        with mock.patch("termglobe.cli.time.monotonic", return_value=10.01):
            assert compute_frame_sleep(10.0, 1 / 30) == pytest.approx(1 / 30 - 0.01)

    def test_never_negative(self) -> None:
        with mock.patch("termglobe.cli.time.monotonic", return_value=11.0):
            assert compute_frame_sleep(10.0, 1 / 30) == 0.0


# ---------------------------------------------------------------------------
# Smoke tests: _display_loop and main
# ---------------------------------------------------------------------------

def _make_mock_stdscr(keys, rows: int = 24, cols: int = 80) -> mock.MagicMock:
    stdscr = mock.MagicMock()
    stdscr.getmaxyx.return_value = (rows, cols)
    stdscr.getch.side_effect = list(keys)
    return stdscr


@pytest.fixture
def patched_curses():
    with mock.patch("curses.curs_set"), \
         mock.patch("curses.doupdate"), \
         mock.patch("curses.mousemask", return_value=(0, 0)), \
         mock.patch("termglobe.cli.time.sleep"):
        yield


class TestDisplayLoop:
    def test_interactive_quits_on_q(self, patched_curses, controller) -> None:
        stdscr = _make_mock_stdscr([-1, ord("+"), ord("q")])
        config = CLIConfig(mode=Mode.INTERACTIVE)
        _display_loop(stdscr, config, controller, " .:-=+*#%@")
        assert stdscr.getch.call_count == 3
        assert controller.globe.spin_speed == SPIN_STEP
        assert stdscr.addstr.called

    def test_screensaver_any_key_exits(self, patched_curses, controller) -> None:
        stdscr = _make_mock_stdscr([-1, -1, ord("x")])
        _display_loop(stdscr, CLIConfig(mode=Mode.SCREENSAVER), controller, " .#")
        assert stdscr.getch.call_count == 3

    def test_listing_plays_targets(self, patched_curses, controller) -> None:
        stdscr = _make_mock_stdscr([-1, ord(" "), ord(" ")])
        targets = [(0.0, 40.0), (10.0, 50.0)]
        _display_loop(stdscr, CLIConfig(mode=Mode.LISTING), controller, " .#", targets)
        assert controller.playback is not None
        assert controller.playback.index == 1

    def test_resize_rebuilds_canvas(self, patched_curses, controller) -> None:
        stdscr = _make_mock_stdscr([curses.KEY_RESIZE, ord("q")])
        with mock.patch("curses.update_lines_cols", create=True):
            _display_loop(stdscr, CLIConfig(mode=Mode.INTERACTIVE), controller, " .#")
        stdscr.clear.assert_called()

    def test_background_char_fills_screen(self, patched_curses, controller) -> None:
        stdscr = _make_mock_stdscr([-1, ord("q")], rows=20, cols=40)
        _display_loop(stdscr, CLIConfig(mode=Mode.INTERACTIVE), controller, " .#", None, "~")
        written = [call.args for call in stdscr.addstr.call_args_list]
        assert (0, 0, "~") in written


class TestMain:
    def test_not_a_terminal(self, capsys: pytest.CaptureFixture[str]) -> None:
        with mock.patch("termglobe.cli.is_terminal", return_value=False), \
             mock.patch("termglobe.cli._configure_logging"):
            with pytest.raises(SystemExit) as exc_info:
                main([])
        assert exc_info.value.code == 1
        assert "interactive terminal" in capsys.readouterr().err

    def test_calls_curses_wrapper(self) -> None:
        with mock.patch("termglobe.cli.curses.wrapper") as wrapper, \
             mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"):
            main(["-i"])
        wrapper.assert_called_once()

    def test_keyboard_interrupt(self) -> None:
        with mock.patch("termglobe.cli.curses.wrapper", side_effect=KeyboardInterrupt), \
             mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"):
            main([])

    def test_pipe_reads_stdin(self) -> None:
        with mock.patch("termglobe.cli.curses.wrapper") as wrapper, \
             mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"), \
             mock.patch("termglobe.cli._reattach_tty") as reattach, \
             mock.patch("termglobe.cli.sys.stdin", io.StringIO("0.5,0.5;0.25,0.5\n")):
            main(["-p"])
        reattach.assert_called_once()
        wrapper.assert_called_once()

    def test_pipe_empty_stdin(self, capsys: pytest.CaptureFixture[str]) -> None:
        with mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"), \
             mock.patch("termglobe.cli.sys.stdin", io.StringIO("")):
            with pytest.raises(SystemExit) as exc_info:
                main(["-p"])
        assert exc_info.value.code == 1
        assert "No coordinates" in capsys.readouterr().err

    def test_pipe_malformed_stdin(self, capsys: pytest.CaptureFixture[str]) -> None:
        with mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"), \
             mock.patch("termglobe.cli.sys.stdin", io.StringIO("0.5;oops")):
            with pytest.raises(SystemExit) as exc_info:
                main(["-p"])
        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_bad_texture_file(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        bad = tmp_path / "day.txt"
        bad.write_text("@?@\n")
        with mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"):
            with pytest.raises(SystemExit) as exc_info:
                main(["--texture", str(bad), "--palette", "classic"])
        assert exc_info.value.code == 1
        assert "not in the palette" in capsys.readouterr().err

    def test_palette_background_reaches_loop(self) -> None:
        dots = Palette(name="dots", background_char=".")
        with mock.patch("termglobe.cli.curses.wrapper") as wrapper, \
             mock.patch("termglobe.cli.is_terminal", return_value=True), \
             mock.patch("termglobe.cli._configure_logging"), \
             mock.patch("termglobe.cli.get_palette", return_value=dots), \
             mock.patch("termglobe.cli._display_loop") as loop:
            main(["-i"])
            wrapper.call_args.args[0](mock.MagicMock())
        assert loop.call_args.args[-1] == "."
        assert loop.call_args.args[3] == dots.ramp
