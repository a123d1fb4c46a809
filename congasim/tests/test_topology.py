"""
叶/核心拓扑测试
"""

import pytest

from congasim.core.config import LINK_SPEED_10G, LINK_SPEED_40G
from congasim.core.logger.logfile import Logfile
from congasim.core.logger.queue import QueueLoggerFactory
from congasim.datacenter import (
    ConfigurationError, InvariantViolation, LeafSpineTopology, SwitchTier, build_fabric,
)
from congasim.queues import FairQueue


def small_fabric(eventlist, **overrides):
    params = dict(core_count=3, leaf_count=4, servers_per_leaf=5,
                  leaf_link_rate=LINK_SPEED_10G, core_link_rate=LINK_SPEED_40G,
                  leaf_buffer_bytes=50000, core_buffer_bytes=100000,
                  endpoint_buffer_bytes=800000, hop_delay=1_000_000,
                  eventlist=eventlist)
    params.update(overrides)
    return LeafSpineTopology(**params)


class TestLeafSpineTopology:

    def test_link_counts(self, eventlist):
        topo = small_fabric(eventlist)

        assert topo.no_of_nodes() == 20
        assert len(topo.leaf_core_link_pairs()) == 12
        assert len(topo.server_link_pairs()) == 20
        assert topo.link_count() == 2 * 12 + 2 * 20
        assert len(topo.leaf_switches()) == 4
        assert len(topo.core_switches()) == 3

    def test_every_leaf_core_pair_is_connected(self, eventlist):
        topo = small_fabric(eventlist)

        for leaf in range(topo.leaf_count):
            for core in range(topo.core_count):
                up = topo.leaf_uplink(leaf, core)
                down = topo.core_downlink(core, leaf)
                assert up.src is topo.leaf_switch(leaf)
                assert up.dst is topo.core_switch(core)
                assert down.src is topo.core_switch(core)
                assert down.dst is topo.leaf_switch(leaf)
                assert up.queue.nodename() == f"LeafToCore_{leaf}_{core}"
                assert down.queue.nodename() == f"CoreToLeaf_{core}_{leaf}"

    def test_link_rates_and_buffers(self, eventlist):
        topo = small_fabric(eventlist)

        up = topo.leaf_uplink(1, 2)
        down = topo.core_downlink(2, 1)
        assert isinstance(up.queue, FairQueue)
        assert up.queue.bitrate == LINK_SPEED_10G
        assert up.queue.maxsize() == 50000
        assert down.queue.bitrate == LINK_SPEED_40G
        assert down.queue.maxsize() == 100000
        assert up.pipe.delay() == 1_000_000

        server = topo.server(7)
        assert server.uplink.queue.maxsize() == 800000
        assert server.uplink.queue.bitrate == LINK_SPEED_10G
        assert server.downlink.queue.maxsize() == 50000

    def test_servers_are_numbered_by_leaf(self, eventlist):
        topo = small_fabric(eventlist)

        server = topo.server(7)
        assert server.server_id == 7
        assert server.leaf_index == 1
        assert server.index_in_leaf == 2
        assert server.nodename() == "Server_1_2"
        assert topo.leaf_of(19) == 3
        assert server.uplink.dst is topo.leaf_switch(1)
        assert server.downlink.src is topo.leaf_switch(1)

    def test_queues_report_to_their_switch(self, eventlist):
        topo = small_fabric(eventlist)

        assert topo.leaf_uplink(0, 1).queue.getSwitch() is topo.leaf_switch(0)
        assert topo.core_downlink(1, 0).queue.getSwitch() is topo.core_switch(1)
        assert topo.server(3).downlink.queue.getSwitch() is topo.leaf_switch(0)
        # 服务器发送队列不属于任何交换机
        assert topo.server(3).uplink.queue.getSwitch() is None

    def test_switch_egress_links(self, eventlist):
        topo = small_fabric(eventlist)

        leaf = topo.leaf_switch(2)
        core = topo.core_switch(0)
        assert leaf.tier is SwitchTier.LEAF
        assert core.tier is SwitchTier.CORE
        assert len(leaf.links()) == topo.core_count + topo.servers_per_leaf
        assert len(core.links()) == topo.leaf_count

    def test_get_neighbours(self, eventlist):
        topo = small_fabric(eventlist)
        assert topo.get_neighbours(6) == [5, 7, 8, 9]

    @pytest.mark.parametrize("field", [
        "core_count", "leaf_count", "servers_per_leaf", "leaf_link_rate", "core_link_rate",
        "leaf_buffer_bytes", "core_buffer_bytes", "endpoint_buffer_bytes", "hop_delay",
    ])
    def test_non_positive_parameter_rejected(self, eventlist, field):
        with pytest.raises(ConfigurationError):
            small_fabric(eventlist, **{field: 0})

    def test_out_of_range_lookups(self, eventlist):
        topo = small_fabric(eventlist)

        with pytest.raises(InvariantViolation):
            topo.server(20)
        with pytest.raises(InvariantViolation):
            topo.server(-1)
        with pytest.raises(InvariantViolation):
            topo.leaf_uplink(4, 0)
        with pytest.raises(InvariantViolation):
            topo.core_downlink(3, 0)

    def test_queue_logger_per_queue(self, eventlist):
        factory = QueueLoggerFactory(None, QueueLoggerFactory.QueueLoggerType.LOGGER_SIMPLE, eventlist)
        topo = small_fabric(eventlist, logger_factory=factory)
        assert len(factory.loggers()) == topo.link_count()

    def test_switch_loggers_sample_periodically(self, eventlist, tmp_path):
        topo = small_fabric(eventlist)
        logfile = Logfile(str(tmp_path / "switches.dat"), eventlist)
        try:
            topo.add_switch_loggers(logfile, 1_000_000)
            assert eventlist.pending_count() == topo.leaf_count + topo.core_count

            eventlist.set_endtime(3_500_000)
            while eventlist.do_next_event():
                pass
        finally:
            logfile.close()

        assert eventlist.now() == 3_000_000

    def test_reference_fabric(self, eventlist):
        topo = build_fabric()

        assert topo.core_count == 12
        assert topo.leaf_count == 24
        assert topo.servers_per_leaf == 32
        assert topo.no_of_nodes() == 768
        assert topo.link_count() == 2 * 288 + 2 * 768
        assert topo.hop_delay == 10_000_000


class TestFabricSwitch:

    def test_counters_and_observer(self, eventlist):
        topo = small_fabric(eventlist)
        leaf = topo.leaf_switch(0)
        queue = topo.leaf_uplink(0, 0).queue
        seen = []
        leaf.add_observer(lambda switch, q, event, pkt: seen.append((switch, q, event)))

        class FakePacket:
            def size(self):
                return 1500

        leaf.queue_event(queue, "arrive", FakePacket())
        leaf.queue_event(queue, "forward", FakePacket())
        leaf.queue_event(queue, "drop", FakePacket())

        assert leaf.packets_arrived() == 1
        assert leaf.packets_forwarded() == 1
        assert leaf.bytes_forwarded() == 1500
        assert leaf.packets_dropped() == 1
        assert [e for _, _, e in seen] == ["arrive", "forward", "drop"]
        assert seen[0][0] is leaf and seen[0][1] is queue

    def test_unknown_event_rejected(self, eventlist):
        topo = small_fabric(eventlist)
        with pytest.raises(ValueError):
            topo.core_switch(0).queue_event(topo.core_downlink(0, 0).queue, "teleport", None)
