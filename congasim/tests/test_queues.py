"""
队列与管道测试

测试覆盖：
1. 线速发送时间与管道延迟
2. 尾丢弃
3. FairQueue 按流轮询
4. 交换机事件通知
5. 利用率统计与逐包流量日志
"""

import pytest

from congasim.core.config import LINK_SPEED_1G, microseconds_to_picoseconds
from congasim.core.logger import Logfile, TrafficLogger, TrafficLoggerSimple
from congasim.core.network import PacketFlow, PacketSink
from congasim.core.pipe import Pipe
from congasim.core.route import Route
from congasim.packets.data_packet import DataPacket
from congasim.queues import FairPullQueue, FairQueue, Queue


class CollectSink(PacketSink):
    """测试用的接收端，记录到达时间和数据包"""

    def __init__(self, eventlist):
        super().__init__()
        self._eventlist = eventlist
        self.received = []

    def receivePacket(self, pkt):
        self.received.append((self._eventlist.now(), pkt))

    def nodename(self):
        return "collect"


def run_all(eventlist):
    while eventlist.do_next_event():
        pass


def make_route(*elements):
    route = Route()
    for element in elements:
        route.push_back(element)
    return route


class TestQueueAndPipe:

    def test_packet_departs_after_drain_time_plus_delay(self, eventlist):
        queue = Queue(LINK_SPEED_1G, 100000, eventlist)
        pipe = Pipe(microseconds_to_picoseconds(10), eventlist)
        sink = CollectSink(eventlist)
        pkt = DataPacket.newpkt(PacketFlow(None), make_route(queue, pipe, sink), 1, 1500)

        pkt.sendOn()
        run_all(eventlist)

        # 1500 字节 @ 1Gb/s = 12us，再加 10us 管道延迟
        assert len(sink.received) == 1
        assert sink.received[0][0] == 22_000_000
        assert queue.queuesize() == 0

    def test_back_to_back_packets_are_serialised(self, eventlist):
        queue = Queue(LINK_SPEED_1G, 100000, eventlist)
        sink = CollectSink(eventlist)
        route = make_route(queue, sink)
        flow = PacketFlow(None)
        for seqno in (1, 1501, 3001):
            DataPacket.newpkt(flow, route, seqno, 1500).sendOn()

        run_all(eventlist)

        assert [t for t, _ in sink.received] == [12_000_000, 24_000_000, 36_000_000]
        assert [p.seqno() for _, p in sink.received] == [1, 1501, 3001]

    def test_tail_drop_when_buffer_full(self, eventlist):
        queue = Queue(LINK_SPEED_1G, 3000, eventlist)
        sink = CollectSink(eventlist)
        route = make_route(queue, sink)
        flow = PacketFlow(None)
        for seqno in (1, 1501, 3001):
            DataPacket.newpkt(flow, route, seqno, 1500).sendOn()

        assert queue.num_drops() == 1
        assert queue.queuesize() == 3000

        run_all(eventlist)
        assert len(sink.received) == 2

    def test_invalid_queue_parameters(self, eventlist):
        with pytest.raises(ValueError):
            Queue(0, 1000, eventlist)
        with pytest.raises(ValueError):
            Queue(LINK_SPEED_1G, 0, eventlist)

    def test_pipe_keeps_arrival_order(self, eventlist):
        pipe = Pipe(1000, eventlist)
        sink = CollectSink(eventlist)
        route = make_route(pipe, sink)
        flow = PacketFlow(None)

        DataPacket.newpkt(flow, route, 1, 100).sendOn()
        DataPacket.newpkt(flow, route, 101, 100).sendOn()
        assert pipe.inflight() == 2

        run_all(eventlist)
        assert [p.seqno() for _, p in sink.received] == [1, 101]
        assert all(t == 1000 for t, _ in sink.received)
        assert pipe.inflight() == 0


class TestFairPullQueue:

    def test_round_robin_between_flows(self):
        fq = FairPullQueue()
        a, b = PacketFlow(None), PacketFlow(None)
        route = Route()
        for seqno in (1, 2, 3):
            fq.enqueue(DataPacket.newpkt(a, route, seqno, 1))
        fq.enqueue(DataPacket.newpkt(b, route, 10, 1))

        assert fq.size() == 4
        assert fq.flow_count() == 2

        order = []
        while not fq.empty():
            pkt = fq.dequeue()
            order.append((pkt.flow_id(), pkt.seqno()))

        assert order == [(a.flow_id(), 1), (b.flow_id(), 10), (a.flow_id(), 2), (a.flow_id(), 3)]
        assert fq.dequeue() is None
        assert fq.flow_count() == 0


class TestFairQueue:

    def test_flows_share_the_link(self, eventlist):
        queue = FairQueue(LINK_SPEED_1G, 100000, eventlist)
        sink = CollectSink(eventlist)
        route = make_route(queue, sink)
        a, b = PacketFlow(None), PacketFlow(None)
        for seqno in (1, 2, 3):
            DataPacket.newpkt(a, route, seqno, 1500).sendOn()
        for seqno in (1, 2, 3):
            DataPacket.newpkt(b, route, seqno, 1500).sendOn()

        assert queue.queuesize() == 9000
        run_all(eventlist)

        # a1 已在发送中；之后两条流交替
        names = {a.flow_id(): "a", b.flow_id(): "b"}
        order = [f"{names[p.flow_id()]}{p.seqno()}" for _, p in sink.received]
        assert order == ["a1", "a2", "b1", "a3", "b2", "b3"]
        assert queue.queuesize() == 0
        assert queue.active_flows() == 0

    def test_tail_drop_counts_packet_in_service(self, eventlist):
        queue = FairQueue(LINK_SPEED_1G, 1500, eventlist)
        route = make_route(queue, CollectSink(eventlist))
        flow = PacketFlow(None)
        DataPacket.newpkt(flow, route, 1, 1500).sendOn()
        DataPacket.newpkt(flow, route, 1501, 1500).sendOn()
        assert queue.num_drops() == 1


class RecordingSwitch:
    """记录队列事件的交换机替身"""

    def __init__(self):
        self.events = []

    def queue_event(self, queue, event, pkt):
        self.events.append(event)


class TestSwitchNotification:

    def test_queue_reports_arrive_forward_and_drop(self, eventlist):
        switch = RecordingSwitch()
        queue = Queue(LINK_SPEED_1G, 1500, eventlist)
        queue.setSwitch(switch)
        route = make_route(queue, CollectSink(eventlist))
        flow = PacketFlow(None)
        DataPacket.newpkt(flow, route, 1, 1500).sendOn()
        DataPacket.newpkt(flow, route, 1501, 1500).sendOn()
        run_all(eventlist)

        assert switch.events == ["arrive", "arrive", "drop", "forward"]
        assert queue.getSwitch() is switch

    def test_switch_can_only_be_set_once(self, eventlist):
        queue = Queue(LINK_SPEED_1G, 1500, eventlist)
        queue.setSwitch(RecordingSwitch())
        with pytest.raises(AssertionError):
            queue.setSwitch(RecordingSwitch())


class TestUtilisationAndTrafficLog:

    def test_average_utilization_over_window(self, eventlist):
        queue = Queue(LINK_SPEED_1G, 100000, eventlist)
        sink = CollectSink(eventlist)
        DataPacket.newpkt(PacketFlow(None), make_route(queue, sink), 1, 1500).sendOn()
        run_all(eventlist)

        # 12us 忙碌 / 30us 窗口
        assert queue.average_utilization() == 40

    def read_records(self, logfile):
        logfile.close()
        with open(logfile.filename()) as f:
            return [line.split() for line in f if not line.startswith("#")]

    def test_traffic_records_per_hop(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "traffic.dat"), eventlist)
        logger = TrafficLoggerSimple()
        logfile.addLogger(logger)

        queue = Queue(LINK_SPEED_1G, 100000, eventlist)
        pipe = Pipe(microseconds_to_picoseconds(10), eventlist)
        DataPacket.newpkt(PacketFlow(logger), make_route(queue, pipe, CollectSink(eventlist)), 1, 1500).sendOn()
        run_all(eventlist)

        records = self.read_records(logfile)
        arrive = str(int(TrafficLogger.TrafficEvent.PKT_ARRIVE))
        depart = str(int(TrafficLogger.TrafficEvent.PKT_DEPART))
        assert [(r[0], r[2], r[3]) for r in records] == [
            ("0", str(queue.get_id()), arrive),
            ("12000000", str(queue.get_id()), depart),
            ("22000000", str(pipe.get_id()), depart),
        ]

    def test_records_before_start_time_are_skipped(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "traffic.dat"), eventlist)
        logfile.setStartTime(1)
        logger = TrafficLoggerSimple()
        logfile.addLogger(logger)

        queue = Queue(LINK_SPEED_1G, 100000, eventlist)
        DataPacket.newpkt(PacketFlow(logger), make_route(queue, CollectSink(eventlist)), 1, 1500).sendOn()
        run_all(eventlist)

        assert [r[0] for r in self.read_records(logfile)] == ["12000000"]
        assert logfile.record_count() == 1
