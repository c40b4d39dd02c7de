#!/usr/bin/env python3
"""
Heart Snake — Terminal snake with curses.
Features:
- Arrow keys / WASD movement, one direction change per tick, no 180° turns
- Hearts spawn on free cells; eating one grows the snake and scores a point
- Wall and self collision end the game and print DEAD on exit
- Two-column cells with a green head and a status bar showing the score
- Input and the fixed-rate tick run concurrently against one locked state
"""

import curses
import enum
import logging
import random
import sys
import threading
import time
from dataclasses import dataclass

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TICK_INTERVAL = (1000 // 11) / 1000  # seconds, ~11 ticks per second
KEY_POLL_INTERVAL = 0.01
WORKER_JOIN_TIMEOUT = 0.1

STATUS_LABEL = "Score:"
SCORE_COLUMN = 7

BODY_GLYPH = "█"  # full block
HEART = "❤️"  # heavy black heart + emoji presentation selector
CELL_WIDTH = 2

MIN_WIDTH = 8
MIN_HEIGHT = 4

# Styles are curses color pair IDs; 0 is the terminal default
STYLE_DEFAULT = 0
COLOR_HEAD = 1
STYLE_HEAD = COLOR_HEAD

# Tick outcomes
ALIVE = "alive"
DEAD = "DEAD"
QUIT = "quit"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cell:
    x: int
    y: int

    def __add__(self, other):
        return Cell(self.x + other.x, self.y + other.y)


class Direction(enum.IntEnum):
    NONE = 0
    UP = 1
    RIGHT = 2
    DOWN = 3
    LEFT = 4


# One logical step; horizontal steps cover a full two-column cell
STEP = {
    Direction.UP: Cell(0, -1),
    Direction.RIGHT: Cell(CELL_WIDTH, 0),
    Direction.DOWN: Cell(0, 1),
    Direction.LEFT: Cell(-CELL_WIDTH, 0),
}

OPPOSITE = {
    Direction.NONE: Direction.NONE,
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


# ---------------------------------------------------------------------------
# Snake body
# ---------------------------------------------------------------------------

class SnakeBody:
    """Occupied cells ordered tail first, head last."""

    def __init__(self, cells):
        self.cells = list(cells)
        if not self.cells:
            raise ValueError("snake needs at least one cell")

    @property
    def head(self):
        return self.cells[-1]

    def advance(self, new_head, grow=False):
        """Append the new head, dropping the tail unless growing."""
        if not grow:
            self.cells = self.cells[1:]
        self.cells.append(new_head)

    def __contains__(self, cell):
        return cell in self.cells

    def __iter__(self):
        return iter(self.cells)

    def __len__(self):
        return len(self.cells)


# ---------------------------------------------------------------------------
# Food spawning
# ---------------------------------------------------------------------------

class FoodSpawner:
    """Picks random free cells for hearts."""

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random.Random()

    def random_location(self, width, height):
        """Random cell with an even column whose glyph fits on the grid."""
        x = self.rng.randrange(width)
        y = self.rng.randrange(height)
        if x % 2 != 0:
            x += 1
        if x >= width - 1:
            x -= 2
        return Cell(x, y)

    def spawn(self, width, height, occupied):
        # Unbounded: on a nearly full grid this can spin for a long time.
        candidate = self.random_location(width, height)
        while candidate in occupied:
            candidate = self.random_location(width, height)
        log.debug("heart spawned at (%d, %d)", candidate.x, candidate.y)
        return candidate


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------

class GameState:
    """All mutable game data, guarded by a single lock.

    ``change_direction`` and ``update`` are the only mutators. Both hold
    ``lock`` for their whole duration, so callers on the input thread and
    the tick loop never see a half-applied tick.
    """

    def __init__(self, width, height, snake, heading=Direction.UP,
                 last_heading=Direction.NONE, spawner=None):
        if heading == Direction.NONE and last_heading == Direction.NONE:
            raise ValueError("snake needs a starting heading")
        self.width = width
        self.height = height
        self.snake = snake if isinstance(snake, SnakeBody) else SnakeBody(snake)
        self.food = None
        self.score = 0
        self.heading = heading
        self.last_heading = last_heading
        self.spawner = spawner if spawner is not None else FoodSpawner()
        self.lock = threading.Lock()

    def change_direction(self, requested):
        """Queue a direction for the next tick.

        Only the first request between two ticks is taken, and a reversal
        onto the neck is refused while the snake is longer than one cell.
        Refused requests are dropped silently.
        """
        with self.lock:
            if requested == Direction.NONE or self.heading != Direction.NONE:
                return
            if len(self.snake) > 1 and requested == OPPOSITE[self.last_heading]:
                return
            self.heading = requested

    def in_bounds(self, cell):
        """Both columns of the cell must fit on the grid."""
        return (0 <= cell.x and cell.x + CELL_WIDTH - 1 < self.width
                and 0 <= cell.y < self.height)

    def update(self, display):
        """Advance one tick. Returns ALIVE, or DEAD on a collision."""
        with self.lock:
            self.clear(display)

            if self.heading != Direction.NONE:
                heading = self.heading
            else:
                heading = self.last_heading
            new_head = self.snake.head + STEP[heading]

            # Check for wall collision (game over)
            if not self.in_bounds(new_head):
                log.info("hit the wall at (%d, %d), score %d",
                         new_head.x, new_head.y, self.score)
                return DEAD

            # Check for self collision (game over)
            if new_head in self.snake:
                log.info("bit itself at (%d, %d), score %d",
                         new_head.x, new_head.y, self.score)
                return DEAD

            grow = False
            respawn = self.food is None
            if self.food is not None and new_head == self.food:
                grow = True
                self.score += 1
                respawn = True

            self.snake.advance(new_head, grow)
            if respawn:
                self.food = self.spawner.spawn(self.width, self.height, self.snake)

            self.draw(display)

            self.last_heading = heading
            # Re-open the slot for the next direction change
            self.heading = Direction.NONE
            return ALIVE

    def clear(self, display):
        """Blank only what the last frame drew: heart, body, score digits."""
        if self.food is not None:
            display.clear_cell(self.food.x, self.food.y)
            display.clear_cell(self.food.x + 1, self.food.y)

        for cell in self.snake:
            display.clear_cell(cell.x, cell.y)
            display.clear_cell(cell.x + 1, cell.y)

        for x in range(SCORE_COLUMN, self.width):
            display.clear_cell(x, self.height)

    def draw(self, display):
        """Draw heart, snake and score, then push the frame."""
        if self.food is not None:
            display.set_glyph_sequence(self.food.x, self.food.y,
                                       HEART[0], HEART[1:], STYLE_DEFAULT)

        head = self.snake.head
        for cell in self.snake:
            style = STYLE_HEAD if cell == head else STYLE_DEFAULT
            display.set_cell(cell.x, cell.y, style, BODY_GLYPH)
            display.set_cell(cell.x + 1, cell.y, style, BODY_GLYPH)

        for offset, char in enumerate(str(self.score)):
            display.set_cell(SCORE_COLUMN + offset, self.height, STYLE_DEFAULT, char)

        display.present()

    def draw_status_label(self, display):
        for offset, char in enumerate(STATUS_LABEL):
            display.set_cell(offset, self.height, STYLE_DEFAULT, char)


def new_game(width, height, spawner=None):
    """Fresh state: a one-cell snake at the bottom center, heading up."""
    half_width = width // 2
    start = Cell(half_width - half_width % 2, height - 1)
    return GameState(width, height, [start], spawner=spawner)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

KEY_MAP = {
    curses.KEY_UP: Direction.UP, ord('w'): Direction.UP, ord('W'): Direction.UP,
    curses.KEY_RIGHT: Direction.RIGHT, ord('d'): Direction.RIGHT, ord('D'): Direction.RIGHT,
    curses.KEY_DOWN: Direction.DOWN, ord('s'): Direction.DOWN, ord('S'): Direction.DOWN,
    curses.KEY_LEFT: Direction.LEFT, ord('a'): Direction.LEFT, ord('A'): Direction.LEFT,
}

CTRL_C = 3
ESCAPE = 27
QUIT_KEYS = {ord('q'), ord('Q'), CTRL_C, ESCAPE}


def handle_key(state, key):
    """Apply one key event. Returns False when the player asked to quit."""
    if key in QUIT_KEYS:
        return False
    direction = KEY_MAP.get(key)
    if direction is not None:
        state.change_direction(direction)
    return True


def input_worker(state, keys, quit_event):
    """Feed key events into the state until a quit key arrives."""
    for key in keys:
        if quit_event.is_set():
            return
        if not handle_key(state, key):
            log.info("quit requested")
            quit_event.set()
            return


# ---------------------------------------------------------------------------
# Terminal adapters
# ---------------------------------------------------------------------------

class CursesDisplay:
    """Display backed by a curses window.

    Callers hold the game lock around every call; curses itself is not
    thread-safe.
    """

    def __init__(self, window):
        self.window = window

    def _put(self, x, y, text, attr):
        # Writes off the visible edge (bottom-right cell, clipped heart) fail
        try:
            self.window.addstr(y, x, text, attr)
        except curses.error:
            pass

    def clear_cell(self, x, y):
        self._put(x, y, " ", curses.A_NORMAL)

    def set_cell(self, x, y, style, glyph):
        self._put(x, y, glyph, curses.color_pair(style))

    def set_glyph_sequence(self, x, y, primary, continuation, style):
        self._put(x, y, primary + "".join(continuation), curses.color_pair(style))

    def present(self):
        self.window.refresh()

    def shutdown(self):
        self.window.nodelay(False)
        try:
            curses.curs_set(1)
        except curses.error:
            pass


def curses_keys(window, lock, stop, poll_interval=KEY_POLL_INTERVAL):
    """Key events from a non-blocking window until ``stop`` is set.

    Each read happens under ``lock`` so it never interleaves with drawing.
    """
    while not stop.is_set():
        with lock:
            key = window.getch()
        if key == -1:
            time.sleep(poll_interval)
            continue
        yield key


# ---------------------------------------------------------------------------
# Game loop
# ---------------------------------------------------------------------------

def run_game(state, display, keys, interval=TICK_INTERVAL, quit_event=None):
    """Tick until the snake dies or the player quits.

    Input is read on a daemon thread; ticks run here. Returns DEAD or QUIT
    after shutting the display down.
    """
    if quit_event is None:
        quit_event = threading.Event()
    worker = threading.Thread(target=input_worker,
                              args=(state, keys, quit_event), daemon=True)
    worker.start()

    outcome = QUIT
    try:
        while not quit_event.wait(interval):
            if state.update(display) == DEAD:
                outcome = DEAD
                break
    except KeyboardInterrupt:
        log.info("interrupted")
        outcome = QUIT
    finally:
        quit_event.set()
        worker.join(WORKER_JOIN_TIMEOUT)
        with state.lock:
            display.shutdown()
    return outcome


def show_too_small(stdscr, rows, cols):
    stdscr.nodelay(False)
    stdscr.addstr(0, 0, "Terminal too small!")
    stdscr.addstr(1, 0, f"Need at least {MIN_HEIGHT + 1}x{MIN_WIDTH}, got {rows}x{cols}")
    stdscr.addstr(2, 0, "Press 'q' to quit")
    while True:
        ch = stdscr.getch()
        if ch in QUIT_KEYS:
            return


def main(stdscr):
    stdscr.clear()

    # Initialize colors
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(COLOR_HEAD, curses.COLOR_GREEN, -1)  # Snake head
    try:
        curses.curs_set(0)
    except curses.error:
        pass

    rows, cols = stdscr.getmaxyx()
    # Bottom row is the status bar
    height = rows - 1
    if height < MIN_HEIGHT or cols < MIN_WIDTH:
        show_too_small(stdscr, rows, cols)
        return QUIT

    stdscr.nodelay(True)
    stdscr.keypad(True)

    state = new_game(cols, height)
    display = CursesDisplay(stdscr)
    with state.lock:
        state.draw_status_label(display)
        state.draw(display)

    quit_event = threading.Event()
    keys = curses_keys(stdscr, state.lock, quit_event)
    return run_game(state, display, keys, quit_event=quit_event)


def run():
    """Console entry point; prints DEAD once the terminal is restored."""
    try:
        outcome = curses.wrapper(main)
    except KeyboardInterrupt:
        outcome = QUIT
    if outcome == DEAD:
        print("DEAD")
    return 0


if __name__ == "__main__":
    sys.exit(run())
