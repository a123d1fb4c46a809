"""Leaf and core switches of the two-tier fabric."""

from typing import Callable, List, Optional

from ..core.eventlist import EventList
from ..core.logger.core import Logged
from ..core.logger.switch import SwitchLogger, SwitchLoggerFactory
from ..core.network import Packet
from ..queues.base_queue import BaseQueue
from .constants import SwitchTier

# observer(switch, queue, event, pkt)
SwitchObserver = Callable[['FabricSwitch', BaseQueue, str, Packet], None]

_SWITCH_EVENTS = {
    "arrive": SwitchLogger.SwitchEvent.PKT_ARRIVE,
    "forward": SwitchLogger.SwitchEvent.PKT_FORWARD,
    "drop": SwitchLogger.SwitchEvent.PKT_DROP,
}


class FabricSwitch(Logged):
    """
    A leaf or core switch.

    Forwarding is source routed: packets walk the queue/pipe elements on
    their route and never visit the switch object itself. The switch owns
    its egress links, and every egress queue reports arrivals, departures
    and drops back to it through queue_event(). Those events update the
    switch counters and are passed on to the attached SwitchLogger and any
    observers.
    """

    def __init__(self, name: str, tier: SwitchTier, index: int, eventlist: EventList):
        Logged.__init__(self, name)
        self._name = name
        self._tier = tier
        self._index = index
        self._eventlist = eventlist
        self._links: List['Link'] = []
        self._switch_logger: Optional[SwitchLogger] = None
        self._observers: List[SwitchObserver] = []

        self._packets_arrived = 0
        self._packets_forwarded = 0
        self._packets_dropped = 0
        self._bytes_forwarded = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def tier(self) -> SwitchTier:
        return self._tier

    @property
    def index(self) -> int:
        return self._index

    def nodename(self) -> str:
        return self._name

    def add_link(self, link: 'Link') -> None:
        """Attach an egress link; its queue reports to this switch."""
        link.queue.setSwitch(self)
        self._links.append(link)

    def links(self) -> List['Link']:
        return list(self._links)

    def add_logger(self, logfile, sample_period: int) -> SwitchLogger:
        """
        Attach a sampling switch logger.

        Args:
            logfile: Logfile instance
            sample_period: Sampling period in picoseconds
        """
        factory = SwitchLoggerFactory(
            logfile,
            SwitchLoggerFactory.SwitchLoggerType.LOGGER_SAMPLING,
            self._eventlist
        )
        factory.set_sample_period(sample_period)
        self._switch_logger = factory.create_switch_logger(self)
        return self._switch_logger

    def add_observer(self, observer: SwitchObserver) -> None:
        self._observers.append(observer)

    def queue_event(self, queue: BaseQueue, event: str, pkt: Packet) -> None:
        """Called by an egress queue on "arrive", "forward" and "drop"."""
        if event == "arrive":
            self._packets_arrived += 1
        elif event == "forward":
            self._packets_forwarded += 1
            self._bytes_forwarded += pkt.size()
        elif event == "drop":
            self._packets_dropped += 1
        else:
            raise ValueError(f"Unknown switch event {event!r}")

        if self._switch_logger:
            self._switch_logger.log_switch(self, _SWITCH_EVENTS[event], pkt)
        for observer in self._observers:
            observer(self, queue, event, pkt)

    def packets_arrived(self) -> int:
        return self._packets_arrived

    def packets_forwarded(self) -> int:
        return self._packets_forwarded

    def packets_dropped(self) -> int:
        return self._packets_dropped

    def bytes_forwarded(self) -> int:
        return self._bytes_forwarded

    def __str__(self) -> str:
        return f"FabricSwitch({self._name})"

    def __repr__(self) -> str:
        return f"FabricSwitch(name={self._name}, tier={self._tier.name}, links={len(self._links)})"


class Link:
    """
    One direction of a connection: a rate-limited queue followed by a pipe.

    Args:
        queue: Output queue at the sending node
        pipe: Propagation delay towards the receiving node
        src: Sending node (switch or server)
        dst: Receiving node (switch or server)
    """

    def __init__(self, queue: BaseQueue, pipe, src, dst):
        self.queue = queue
        self.pipe = pipe
        self.src = src
        self.dst = dst

    def elements(self) -> tuple:
        """Route elements of this link, in traversal order."""
        return (self.queue, self.pipe)

    def __repr__(self) -> str:
        return f"Link({self.src.nodename()} -> {self.dst.nodename()}, queue={self.queue.nodename()})"
