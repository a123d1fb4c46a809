"""
Shared pytest fixtures

EventList keeps its state in class variables, so every test starts from a
fresh scheduler.
"""

import pytest

from congasim.core.eventlist import EventList


@pytest.fixture(autouse=True)
def eventlist():
    EventList.reset()
    yield EventList.get_the_event_list()
    EventList.reset()
