"""
仿真驱动测试

测试覆盖：
1. 非交互模式运行到事件耗尽
2. 交互模式按批暂停并询问操作员
3. 回答的空白处理与停止
"""

import io
import unittest

from rich.console import Console

from congasim.core.eventlist import EventList, EventSource
from congasim.datacenter import ConfigurationError, DriverState, SimulationDriver
from congasim.datacenter.simulation_driver import CONTINUE_PROMPT


class CountingSource(EventSource):
    """每次事件计数一次"""

    def __init__(self, eventlist: EventList):
        super().__init__(eventlist, "counter")
        self.count = 0

    def do_next_event(self) -> None:
        self.count += 1


class ScriptedPrompt:
    """按顺序返回预设回答，并记录被调用时驱动的状态"""

    def __init__(self, answers, driver_ref=None):
        self._answers = list(answers)
        self.questions = []
        self.states = []
        self.driver = driver_ref

    def __call__(self, text):
        self.questions.append(text)
        if self.driver is not None:
            self.states.append(self.driver.state)
        return self._answers.pop(0) if self._answers else "y"


class TestSimulationDriver(unittest.TestCase):
    """SimulationDriver单元测试"""

    def setUp(self):
        EventList.reset()
        self.eventlist = EventList.get_the_event_list()
        self.source = CountingSource(self.eventlist)
        for t in range(2500):
            self.eventlist.source_is_pending(self.source, t)
        self.output = io.StringIO()
        self.console = Console(file=self.output, width=120)

    def tearDown(self):
        EventList.reset()

    def make_driver(self, answers, batch_size=1000):
        prompt = ScriptedPrompt(answers)
        driver = SimulationDriver(self.eventlist, True, batch_size, prompt, self.console)
        prompt.driver = driver
        return driver, prompt

    def test_non_interactive_runs_to_completion(self):
        driver = SimulationDriver(self.eventlist, console=self.console)
        self.assertEqual(driver.state, DriverState.IDLE)

        self.assertEqual(driver.run(), DriverState.COMPLETED)
        self.assertEqual(driver.events_processed, 2500)
        self.assertEqual(self.source.count, 2500)

    def test_stop_after_first_batch(self):
        """第一批后回答 n"""
        driver, prompt = self.make_driver(["n"])

        self.assertEqual(driver.run(), DriverState.STOPPED)
        self.assertEqual(driver.events_processed, 1000)
        self.assertEqual(self.source.count, 1000)
        self.assertEqual(prompt.questions, [CONTINUE_PROMPT])
        self.assertEqual(self.eventlist.pending_count(), 1500)

    def test_continue_until_exhausted(self):
        """一直回答 y，最后一批不足 batch_size"""
        driver, prompt = self.make_driver(["y", "y"])

        self.assertEqual(driver.run(), DriverState.COMPLETED)
        self.assertEqual(driver.events_processed, 2500)
        self.assertEqual(len(prompt.questions), 2)
        self.assertEqual(prompt.states, [DriverState.PAUSED, DriverState.PAUSED])

    def test_answer_is_stripped(self):
        driver, _ = self.make_driver([" Y ", "  y\n"])
        self.assertEqual(driver.run(), DriverState.COMPLETED)

    def test_anything_but_y_stops(self):
        for answer in ("yes", "", "N", "q"):
            with self.subTest(answer=answer):
                EventList.reset()
                eventlist = EventList.get_the_event_list()
                source = CountingSource(eventlist)
                for t in range(10):
                    eventlist.source_is_pending(source, t)
                driver = SimulationDriver(eventlist, True, 4, ScriptedPrompt([answer]), self.console)

                self.assertEqual(driver.run(), DriverState.STOPPED)
                self.assertEqual(driver.events_processed, 4)

    def test_progress_is_printed(self):
        driver, _ = self.make_driver(["n"])
        driver.run()
        self.assertIn("Processed 1000 events", self.output.getvalue())
        self.assertIn("1500 pending", self.output.getvalue())

    def test_endtime_bounds_the_run(self):
        EventList.reset()
        eventlist = EventList.get_the_event_list()
        eventlist.set_endtime(1000)
        source = CountingSource(eventlist)
        eventlist.source_is_pending(source, 500)
        eventlist.source_is_pending(source, 1500)

        driver = SimulationDriver(eventlist, console=self.console)
        self.assertEqual(driver.run(), DriverState.COMPLETED)
        self.assertEqual(driver.events_processed, 1)

    def test_invalid_batch_size(self):
        with self.assertRaises(ConfigurationError):
            SimulationDriver(self.eventlist, True, 0)
        with self.assertRaises(ConfigurationError):
            SimulationDriver(self.eventlist, True, -5)


if __name__ == '__main__':
    unittest.main()
