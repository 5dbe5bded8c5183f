"""Graphical capture front end (Tk).

A small window shows the prompt and a "Now!" button; pressing it is the
capture event.  Esc, Enter, Space or closing the window cancel.  The
minute question is a second window with three radio buttons.

:mod:`tkinter` is imported when a window is actually opened, so the
rest of the package works on interpreters built without Tk.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from watchdrift._capture import CaptureResult, CaptureSession, InputEvent
from watchdrift._clock import ClockPort
from watchdrift._resolver import MinuteCandidate

logger = logging.getLogger(__name__)

TITLE = "watchdrift"
CANCEL_SEQUENCES = ("<Escape>", "<Return>", "<space>")


class DialogInputSource:
    """:class:`~watchdrift._capture.InputSource` over a Tk root window.

    ``poll`` runs the Tk event loop until an event is posted or the
    timeout timer fires, whichever comes first.
    """

    def __init__(self, root: Any) -> None:
        self._root = root
        self._pending: InputEvent | None = None
        for sequence in CANCEL_SEQUENCES:
            root.bind(sequence, lambda _event: self.post(InputEvent.CANCEL))
        root.protocol("WM_DELETE_WINDOW", lambda: self.post(InputEvent.CANCEL))

    def post(self, event: InputEvent) -> None:
        if self._pending is None:
            self._pending = event
        self._root.quit()

    def poll(self, timeout: float) -> InputEvent | None:
        if self._pending is None:
            timer = self._root.after(max(int(timeout * 1000), 1), self._root.quit)
            try:
                self._root.mainloop()
            finally:
                self._root.after_cancel(timer)
        event, self._pending = self._pending, None
        return event


class DialogFrontEnd:
    """Tk-based :class:`~watchdrift._capture.CaptureFrontEnd`."""

    def __init__(self, *, clock: ClockPort | None = None) -> None:
        self._clock = clock

    def capture(
        self,
        prompt: str,
        max_wait: float,
        poll_interval: float,
        anchor: float | None = None,
    ) -> CaptureResult:
        import tkinter as tk

        root = tk.Tk()
        try:
            root.title(TITLE)
            label = tk.Label(root, text=prompt, wraplength=320, padx=16, pady=12)
            label.pack()
            source = DialogInputSource(root)
            button = tk.Button(root, text="Now!", width=12)
            # press, not release, is the instant the operator reacted
            button.bind(
                "<ButtonPress-1>", lambda _event: source.post(InputEvent.CAPTURE)
            )
            button.pack(pady=(0, 12))
            root.focus_force()

            def announce(text: str) -> None:
                label.configure(text=text)
                root.update_idletasks()

            session = CaptureSession(
                source,
                clock=self._clock,
                announce=announce,
                max_wait=max_wait,
                poll_interval=poll_interval,
            )
            return session.run(prompt, anchor=anchor)
        finally:
            root.destroy()

    def choose_minute(
        self, candidates: Sequence[MinuteCandidate]
    ) -> MinuteCandidate | None:
        import tkinter as tk

        root = tk.Tk()
        root.title(TITLE)
        tk.Label(
            root,
            text="Which minute was the second hand approaching?",
            padx=16,
            pady=8,
        ).pack()

        selected = tk.IntVar(master=root, value=len(candidates) // 2)
        for index, candidate in enumerate(candidates):
            tk.Radiobutton(
                root, text=str(candidate), variable=selected, value=index
            ).pack(anchor="w", padx=16)

        chosen: list[MinuteCandidate] = []

        def accept() -> None:
            chosen.append(candidates[selected.get()])
            root.destroy()

        buttons = tk.Frame(root)
        tk.Button(buttons, text="OK", width=8, command=accept).pack(side="left", padx=4)
        tk.Button(buttons, text="Cancel", width=8, command=root.destroy).pack(
            side="left", padx=4
        )
        buttons.pack(pady=8)
        root.bind("<Escape>", lambda _event: root.destroy())
        root.mainloop()

        if not chosen:
            logger.info("Minute dialog closed without a choice")
            return None
        return chosen[0]
