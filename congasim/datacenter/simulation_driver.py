"""
Simulation driver

Pumps the event list until it runs dry. In interactive mode events are
processed in fixed-size batches and the operator is asked after each full
batch whether to continue.

States:
    RUNNING -> PAUSED (interactive only) -> RUNNING | STOPPED
    RUNNING -> COMPLETED once the event list is exhausted

The driver never looks at the simulation end time; the event list drops
events scheduled past it.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Prompt

from ..core.config import picoseconds_to_seconds
from ..core.eventlist import EventList
from .constants import DEFAULT_BATCH_SIZE
from .errors import ConfigurationError

CONTINUE_PROMPT = "Continue to iterate? (y/n)"


class DriverState(Enum):
    """Driver lifecycle states"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETED = "completed"


class SimulationDriver:
    """
    Drives an EventList to completion or to an operator stop

    Args:
        eventlist: Event list to drive
        interactive: Ask the operator after every batch
        batch_size: Events per batch in interactive mode
        prompt: Callable taking the prompt text and returning the answer;
            defaults to rich.prompt.Prompt.ask
        console: rich Console for progress output

    Raises:
        ConfigurationError: If batch_size is not positive
    """

    def __init__(self, eventlist: EventList, interactive: bool = False,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 prompt: Optional[Callable[[str], str]] = None,
                 console: Optional[Console] = None):
        if batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {batch_size}")

        self._eventlist = eventlist
        self._interactive = interactive
        self._batch_size = batch_size
        self._console = console if console is not None else Console()
        self._prompt = prompt if prompt is not None else self._ask
        self._state = DriverState.IDLE
        self._events_processed = 0

    def _ask(self, text: str) -> str:
        return Prompt.ask(text, console=self._console)

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def events_processed(self) -> int:
        return self._events_processed

    @property
    def interactive(self) -> bool:
        return self._interactive

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def run(self) -> DriverState:
        """
        Run until completion or operator stop

        Returns:
            COMPLETED or STOPPED
        """
        logging.info("Starting CONGA simulation...")
        self._state = DriverState.RUNNING

        if not self._interactive:
            while self._eventlist.do_next_event():
                self._events_processed += 1
            return self._complete()

        while True:
            for _ in range(self._batch_size):
                if not self._eventlist.do_next_event():
                    return self._complete()
                self._events_processed += 1

            self._state = DriverState.PAUSED
            self._console.print(
                f"Processed [bold]{self._events_processed}[/bold] events, "
                f"simulated time {picoseconds_to_seconds(self._eventlist.now()):.6f}s, "
                f"{self._eventlist.pending_count()} pending")
            answer = self._prompt(CONTINUE_PROMPT)
            if (answer or "").strip() not in ("y", "Y"):
                self._state = DriverState.STOPPED
                logging.info(f"Simulation stopped by user after {self._events_processed} events.")
                return self._state
            self._state = DriverState.RUNNING

    def _complete(self) -> DriverState:
        self._state = DriverState.COMPLETED
        logging.info(f"Simulation complete after {self._events_processed} events.")
        return self._state
