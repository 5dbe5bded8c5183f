"""Terminal capture front end (curses).

The operator clicks the left mouse button inside the terminal when the
second hand crosses "12".  Esc, Enter or Space abort the session.
Minute disambiguation, when asked for, happens after curses has
released the screen, as a plain numbered prompt.
"""

from __future__ import annotations

import contextlib
import curses
import logging
from collections.abc import Callable, Sequence
from typing import Any

import typer

from watchdrift._capture import (
    STILL_THERE,
    CaptureResult,
    CaptureSession,
    InputEvent,
)
from watchdrift._clock import ClockPort
from watchdrift._resolver import MinuteCandidate

logger = logging.getLogger(__name__)

CANCEL_KEYS = frozenset({27, 10, 13, curses.KEY_ENTER, ord(" ")})
"""Esc, Enter (LF, CR, keypad) and Space."""

_ESC_DELAY_MS = 25


class CursesInputSource:
    """:class:`~watchdrift._capture.InputSource` reading a curses window.

    ``getch`` blocks for at most the poll timeout, so waiting costs no CPU.

    Args:
        window: A curses window with ``keypad(True)`` set.
        getmouse: Decoder for ``KEY_MOUSE`` events; defaults to
            :func:`curses.getmouse`.
    """

    def __init__(
        self,
        window: Any,
        getmouse: Callable[[], tuple[int, int, int, int, int]] | None = None,
    ) -> None:
        self._window = window
        self._getmouse = getmouse if getmouse is not None else curses.getmouse

    def poll(self, timeout: float) -> InputEvent | None:
        self._window.timeout(max(int(timeout * 1000), 0))
        key = self._window.getch()
        if key == -1:
            return None
        if key in CANCEL_KEYS:
            return InputEvent.CANCEL
        if key == curses.KEY_MOUSE:
            try:
                _id, _x, _y, _z, state = self._getmouse()
            except curses.error:
                return None
            if state & curses.BUTTON1_PRESSED:
                return InputEvent.CAPTURE
        return None


class TerminalFrontEnd:
    """Curses-based :class:`~watchdrift._capture.CaptureFrontEnd`.

    Args:
        clock: Monotonic clock for the capture session.
        echo: Line output used outside curses; defaults to ``typer.echo``.
        prompt: Line input for the minute menu; defaults to ``typer.prompt``.
    """

    def __init__(
        self,
        *,
        clock: ClockPort | None = None,
        echo: Callable[[str], None] = typer.echo,
        prompt: Callable[..., str] = typer.prompt,
    ) -> None:
        self._clock = clock
        self._echo = echo
        self._prompt = prompt

    def capture(
        self,
        prompt: str,
        max_wait: float,
        poll_interval: float,
        anchor: float | None = None,
    ) -> CaptureResult:
        notices: list[str] = []
        result = curses.wrapper(
            self._capture, prompt, max_wait, poll_interval, anchor, notices
        )
        # curses clears the screen on exit; repeat what the operator missed
        for notice in notices:
            self._echo(notice)
        return result

    def _capture(
        self,
        screen: Any,
        prompt: str,
        max_wait: float,
        poll_interval: float,
        anchor: float | None,
        notices: list[str],
    ) -> CaptureResult:
        with contextlib.suppress(curses.error):
            curses.curs_set(0)
        with contextlib.suppress(AttributeError):
            curses.set_escdelay(_ESC_DELAY_MS)
        curses.mousemask(curses.BUTTON1_PRESSED)
        curses.mouseinterval(0)
        screen.keypad(True)

        def announce(text: str) -> None:
            if text == STILL_THERE:
                notices.append(text)
            with contextlib.suppress(curses.error):
                screen.addstr(text + "\n")
            screen.refresh()

        session = CaptureSession(
            CursesInputSource(screen),
            clock=self._clock,
            announce=announce,
            max_wait=max_wait,
            poll_interval=poll_interval,
        )
        return session.run(prompt, anchor=anchor)

    def choose_minute(
        self, candidates: Sequence[MinuteCandidate]
    ) -> MinuteCandidate | None:
        self._echo("Which minute was the second hand approaching?")
        for number, candidate in enumerate(candidates, start=1):
            self._echo(f"  {number}) {candidate}")
        answer = self._prompt(
            f"Choose 1-{len(candidates)} (empty to abort)",
            default="",
            show_default=False,
        ).strip()
        if not answer.isdigit() or not 1 <= int(answer) <= len(candidates):
            logger.info("No minute chosen (answer=%r)", answer)
            return None
        return candidates[int(answer) - 1]
