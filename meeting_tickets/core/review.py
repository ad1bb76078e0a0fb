"""
Interactive ticket review in the terminal.

Draws a full-screen curses form with one bordered box per ticket, each holding
an Accept and a Decline button, plus a Close button at the bottom. The form
state lives in TicketReviewForm so it can be driven without a terminal.
"""

import curses
import logging
import os
import textwrap
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .types import TicketResponse, TicketStatus

logger = logging.getLogger(__name__)

ACCEPT = "accept"
DECLINE = "decline"
CLOSE = "close"

TITLE = "Meeting Tickets"
HELP_LINE = "Tab/arrows: move  Enter/Space: press  a/d: accept/decline  q/Esc: close"

TITLE_HEIGHT = 3
LIST_TOP = 4
BOX_HEIGHT = 5
BOX_STRIDE = 6  # box plus one blank row

KEY_ESCAPE = 27
KEY_CTRL_C = 3
ACTIVATE_KEYS = {10, 13, 32, curses.KEY_ENTER}
CLOSE_KEYS = {KEY_ESCAPE, KEY_CTRL_C, ord("q"), ord("Q")}


class Control(NamedTuple):
    """A focusable button: its kind and the ticket it belongs to (None for Close)."""

    kind: str
    index: Optional[int]


class TicketReviewForm:
    """
    State of the review form: ticket decisions, keyboard focus and whether it was closed.
    """

    def __init__(self, tickets: List[str]):
        self.responses = [TicketResponse(ticket=t) for t in tickets]
        self.controls: List[Control] = []
        for i in range(len(tickets)):
            self.controls.append(Control(ACCEPT, i))
            self.controls.append(Control(DECLINE, i))
        self.controls.append(Control(CLOSE, None))
        self.focus = 0
        self.closed = False

    @property
    def focused(self) -> Control:
        return self.controls[self.focus]

    @property
    def focused_ticket(self) -> Optional[int]:
        return self.focused.index

    def accept(self, index: int) -> None:
        self.responses[index].status = TicketStatus.ACCEPTED

    def decline(self, index: int) -> None:
        self.responses[index].status = TicketStatus.DECLINED

    def close(self) -> None:
        self.closed = True

    def focus_next(self) -> None:
        self.focus = (self.focus + 1) % len(self.controls)

    def focus_prev(self) -> None:
        self.focus = (self.focus - 1) % len(self.controls)

    def focus_ticket(self, delta: int) -> None:
        """Move focus to the same button on a neighbouring ticket (Close sits after the last one)."""
        self.focus = max(0, min(len(self.controls) - 1, self.focus + 2 * delta))

    def focus_control(self, control: Control) -> None:
        self.focus = self.controls.index(control)

    def activate(self, control: Optional[Control] = None) -> None:
        """Press a button (the focused one by default)."""
        control = control or self.focused
        if control.kind == ACCEPT:
            self.accept(control.index)
        elif control.kind == DECLINE:
            self.decline(control.index)
        else:
            self.close()

    def handle_key(self, key: int) -> bool:
        """
        Apply a key press.

        Returns:
            True once the form has been closed
        """
        if key in CLOSE_KEYS:
            self.close()
        elif key in ACTIVATE_KEYS:
            self.activate()
        elif key in (9, curses.KEY_RIGHT):
            self.focus_next()
        elif key in (curses.KEY_BTAB, curses.KEY_LEFT):
            self.focus_prev()
        elif key == curses.KEY_DOWN:
            self.focus_ticket(1)
        elif key == curses.KEY_UP:
            self.focus_ticket(-1)
        elif key in (ord("a"), ord("A")) and self.focused_ticket is not None:
            self.accept(self.focused_ticket)
        elif key in (ord("d"), ord("D")) and self.focused_ticket is not None:
            self.decline(self.focused_ticket)
        return self.closed


def _init_colors() -> Dict[str, int]:
    if not curses.has_colors():
        return {}
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK

    pairs = {
        "title": 1,
        "accepted": 2,
        "declined": 3,
        "accept_btn": 4,
        "decline_btn": 5,
        "close_btn": 6,
        "border": 7,
    }
    curses.init_pair(pairs["title"], curses.COLOR_WHITE, curses.COLOR_BLUE)
    curses.init_pair(pairs["accepted"], curses.COLOR_WHITE, curses.COLOR_GREEN)
    curses.init_pair(pairs["declined"], curses.COLOR_WHITE, curses.COLOR_RED)
    curses.init_pair(pairs["accept_btn"], curses.COLOR_BLACK, curses.COLOR_GREEN)
    curses.init_pair(pairs["decline_btn"], curses.COLOR_BLACK, curses.COLOR_RED)
    curses.init_pair(pairs["close_btn"], curses.COLOR_WHITE, curses.COLOR_BLUE)
    curses.init_pair(pairs["border"], curses.COLOR_WHITE, background)
    return pairs


def _put(win, y: int, x: int, text: str, attr: int = 0) -> None:
    # Writing into the bottom-right cell raises even though the text is drawn
    try:
        win.addnstr(y, x, text, max(0, win.getmaxyx()[1] - x), attr)
    except curses.error:
        pass


class TicketReviewScreen:
    """
    Curses renderer and event loop for a TicketReviewForm.
    """

    def __init__(self, form: TicketReviewForm):
        self.form = form
        self.scroll = 0
        self.pairs: Dict[str, int] = {}

    def _attr(self, name: str, fallback: int = 0) -> int:
        if name in self.pairs:
            return curses.color_pair(self.pairs[name])
        return fallback

    def visible_count(self, height: int) -> int:
        return max(1, (height - 3 - LIST_TOP) // BOX_STRIDE)

    def _sync_scroll(self, visible: int) -> None:
        index = self.form.focused_ticket
        if index is None:
            return
        if index < self.scroll:
            self.scroll = index
        elif index >= self.scroll + visible:
            self.scroll = index - visible + 1

    def draw(self, stdscr) -> Dict[Control, Tuple[int, int, int]]:
        """
        Draw the whole form.

        Returns:
            Clickable regions as control -> (row, first column, end column)
        """
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        hitboxes: Dict[Control, Tuple[int, int, int]] = {}

        if height < LIST_TOP + BOX_HEIGHT + 3 or width < 30:
            _put(stdscr, 0, 0, "Terminal too small. Press q to close.")
            stdscr.refresh()
            return hitboxes

        box_width = max(28, int(width * 0.9))
        left = (width - box_width) // 2

        title = stdscr.derwin(TITLE_HEIGHT, box_width, 0, left)
        title.bkgd(" ", self._attr("title", curses.A_REVERSE))
        title.box()
        _put(title, 1, max(1, (box_width - len(TITLE)) // 2), TITLE, curses.A_BOLD)

        visible = self.visible_count(height)
        self._sync_scroll(visible)
        shown = range(self.scroll, min(len(self.form.responses), self.scroll + visible))

        for slot, index in enumerate(shown):
            hitboxes.update(self._draw_ticket(stdscr, index, LIST_TOP + slot * BOX_STRIDE, left, box_width))

        if self.scroll > 0:
            _put(stdscr, LIST_TOP - 1, left + 2, f"^ {self.scroll} more")
        remaining = len(self.form.responses) - (self.scroll + visible)
        if remaining > 0:
            _put(stdscr, height - 3, left + 2, f"v {remaining} more")

        close_label = "[ Close ]"
        close_x = (width - len(close_label)) // 2
        close = Control(CLOSE, None)
        _put(stdscr, height - 2, close_x, close_label, self._button_attr(close, "close_btn"))
        hitboxes[close] = (height - 2, close_x, close_x + len(close_label))

        _put(stdscr, height - 1, 0, HELP_LINE[: width - 1], curses.A_DIM)
        stdscr.refresh()
        return hitboxes

    def _button_attr(self, control: Control, color: str) -> int:
        attr = self._attr(color, curses.A_BOLD)
        if control == self.form.focused:
            attr |= curses.A_REVERSE | curses.A_BOLD
        return attr

    def _draw_ticket(self, stdscr, index: int, top: int, left: int, box_width: int) -> Dict[Control, Tuple[int, int, int]]:
        response = self.form.responses[index]
        box = stdscr.derwin(BOX_HEIGHT, box_width, top, left)
        if response.status == TicketStatus.ACCEPTED:
            box.bkgd(" ", self._attr("accepted", curses.A_BOLD))
        elif response.status == TicketStatus.DECLINED:
            box.bkgd(" ", self._attr("declined", curses.A_DIM))
        else:
            box.bkgd(" ", self._attr("border"))
        box.box()

        if response.status != TicketStatus.PENDING:
            label = f" {response.status.value} "
            _put(box, 0, max(1, box_width - len(label) - 2), label)

        for row, line in enumerate(textwrap.wrap(response.ticket, max(1, box_width - 4), max_lines=2, placeholder=" …")):
            _put(box, 1 + row, 2, line)

        accept = Control(ACCEPT, index)
        decline = Control(DECLINE, index)
        accept_label = "[ Accept ]"
        decline_label = "[ Decline ]"
        accept_x = box_width // 4
        decline_x = max(accept_x + len(accept_label) + 1, (3 * box_width) // 4 - len(decline_label))
        row = BOX_HEIGHT - 2
        _put(box, row, accept_x, accept_label, self._button_attr(accept, "accept_btn"))
        _put(box, row, decline_x, decline_label, self._button_attr(decline, "decline_btn"))

        return {
            accept: (top + row, left + accept_x, left + accept_x + len(accept_label)),
            decline: (top + row, left + decline_x, left + decline_x + len(decline_label)),
        }

    def _handle_click(self, hitboxes: Dict[Control, Tuple[int, int, int]]) -> None:
        try:
            _, mx, my, _, _ = curses.getmouse()
        except curses.error:
            return
        for control, (row, start, end) in hitboxes.items():
            if my == row and start <= mx < end:
                self.form.focus_control(control)
                self.form.activate(control)
                return

    def run(self, stdscr) -> List[TicketResponse]:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        curses.raw()
        stdscr.keypad(True)
        curses.mousemask(curses.BUTTON1_CLICKED | curses.BUTTON1_PRESSED)
        self.pairs = _init_colors()

        while not self.form.closed:
            hitboxes = self.draw(stdscr)
            try:
                key = stdscr.getch()
            except KeyboardInterrupt:
                self.form.close()
                break
            if key == curses.KEY_MOUSE:
                self._handle_click(hitboxes)
            elif key != curses.KEY_RESIZE:
                self.form.handle_key(key)

        return self.form.responses


def review_tickets(tickets: List[str], runner: Callable = curses.wrapper) -> List[TicketResponse]:
    """
    Show the tickets in the review form and wait until it is closed.

    Args:
        tickets: Ticket lines to review
        runner: Function that sets up the terminal and calls the screen loop

    Returns:
        One response per ticket, in the original order
    """
    if not tickets:
        return []

    os.environ.setdefault("ESCDELAY", "25")
    form = TicketReviewForm(tickets)
    screen = TicketReviewScreen(form)
    responses = runner(screen.run)

    for response in responses:
        logger.info(f"{response.status.value.capitalize()}: {response.ticket}")
    return responses
