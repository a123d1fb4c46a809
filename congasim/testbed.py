"""
CONGA leaf/core testbed

Builds the two-tier fabric, starts a Poisson flow generator whose routes
come from a RouteGenerator, and drives the event list to the end of the
run, optionally in operator-gated batches.

Usage:
    congasim --duration 0.01 --leaves 4 --cores 2 --servers 8
    congasim duration=0.5 load=0.5 flowsize=50000
"""

import argparse
import logging
import random
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table

from .api.config_parser import LOG_LEVELS, TestbedConfig
from .core.config import (
    microseconds_to_picoseconds, picoseconds_to_microseconds,
    picoseconds_to_seconds, seconds_to_picoseconds,
)
from .core.eventlist import EventList
from .core.logger.logfile import Logfile
from .core.logger.queue import QueueLoggerFactory
from .core.logger.traffic import FlowEventLoggerSimple, TrafficLoggerSimple
from .datacenter.constants import QUEUE_SAMPLING_INTERVAL, SWITCH_SAMPLING_INTERVAL
from .datacenter.errors import ConfigurationError
from .datacenter.flow_generator import FlowGenerator
from .datacenter.leaf_spine_topology import LeafSpineTopology
from .datacenter.route_generator import RouteGenerator, core_selection_from_name
from .datacenter.simulation_driver import DriverState, SimulationDriver


@dataclass
class TestbedRun:
    """Outcome of one testbed run"""
    state: DriverState
    events_processed: int
    topology: LeafSpineTopology
    flow_generator: FlowGenerator
    routes_released: int

    __test__ = False

    def total_drops(self) -> int:
        drops = 0
        for switch in self.topology.leaf_switches() + self.topology.core_switches():
            drops += switch.packets_dropped()
        for server in self.topology.servers():
            drops += server.uplink.queue.num_drops()
        return drops


def conga_testbed(config: TestbedConfig, logfile: Logfile,
                  eventlist: Optional[EventList] = None,
                  prompt: Optional[Callable[[str], str]] = None,
                  console: Optional[Console] = None) -> TestbedRun:
    """
    Run the testbed described by config

    Args:
        config: Testbed configuration; validated before anything is built
        logfile: Simulation record log
        eventlist: Event list; defaults to the global one
        prompt: Operator prompt for interactive mode
        console: rich Console for progress output

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config.validate()
    if eventlist is None:
        eventlist = EventList.get_the_event_list()

    endtime = seconds_to_picoseconds(config.duration)
    eventlist.set_endtime(endtime)
    rng = random.Random(config.seed)

    flow_logger = FlowEventLoggerSimple()
    logfile.addLogger(flow_logger)

    logger_factory = None
    if config.log_queues:
        logger_factory = QueueLoggerFactory(logfile, QueueLoggerFactory.QueueLoggerType.LOGGER_SAMPLING,
                                            eventlist)
        logger_factory.set_sample_period(QUEUE_SAMPLING_INTERVAL)

    topology = LeafSpineTopology(
        core_count=config.core_count,
        leaf_count=config.leaf_count,
        servers_per_leaf=config.servers_per_leaf,
        leaf_link_rate=config.leaf_link_rate,
        core_link_rate=config.core_link_rate,
        leaf_buffer_bytes=config.leaf_buffer,
        core_buffer_bytes=config.core_buffer,
        endpoint_buffer_bytes=config.endhost_buffer,
        hop_delay=microseconds_to_picoseconds(config.hop_delay_us),
        eventlist=eventlist,
        logger_factory=logger_factory,
    )
    if config.log_switches:
        topology.add_switch_loggers(logfile, SWITCH_SAMPLING_INTERVAL)
    for switch in topology.leaf_switches() + topology.core_switches():
        logfile.writeName(switch)

    route_generator = RouteGenerator(topology, core_selection_from_name(config.core_selection, rng), rng)

    flow_generator = FlowGenerator(eventlist, route_generator, config.target_rate(), config.flow_size,
                                   flow_logger=flow_logger, rng=rng)
    flow_generator.setName("CONGA_FlowGenerator")
    flow_generator.set_time_limits(0, endtime)
    flow_generator.set_endhost_queue(config.leaf_link_rate, config.endhost_buffer)
    if config.log_traffic:
        traffic_logger = TrafficLoggerSimple()
        logfile.addLogger(traffic_logger)
        flow_generator.set_traffic_logger(traffic_logger)
    logging.info(f"Flow arrival rate {flow_generator.flow_rate():.1f} flows/s, "
                 f"mean flow size {config.flow_size} bytes, core selection {config.core_selection}")

    driver = SimulationDriver(eventlist, config.interactive, config.batch_size, prompt, console)
    state = driver.run()

    released = flow_generator.release_all()
    return TestbedRun(state, driver.events_processed, topology, flow_generator, released)


def print_summary(run: TestbedRun, eventlist: EventList, console: Console) -> None:
    gen = run.flow_generator
    fcts = [flow.completion_time() for flow in gen.completed()]

    table = Table(title="CONGA testbed")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("State", run.state.value)
    table.add_row("Events processed", str(run.events_processed))
    table.add_row("Simulated time (s)", f"{picoseconds_to_seconds(eventlist.now()):.6f}")
    table.add_row("Flows started", str(gen.flows_started()))
    table.add_row("Flows completed", str(gen.flows_completed()))
    table.add_row("Flows unfinished", str(run.routes_released))
    table.add_row("Packets dropped", str(run.total_drops()))
    if fcts:
        table.add_row("Mean FCT (us)", f"{picoseconds_to_microseconds(sum(fcts) / len(fcts)):.1f}")
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='CONGA leaf/core testbed simulation')
    parser.add_argument('params', nargs='*', metavar='key=value',
                        help='htsim style parameters: duration, load/utilization, flowsize/flow_size')
    parser.add_argument('-o', '--output', default=None,
                        help='Output log file (default logout.dat)')
    parser.add_argument('--duration', type=float, default=None,
                        help='Simulation time in seconds')
    parser.add_argument('--load', type=float, default=None,
                        help='Offered load as a fraction of the leaf link rate')
    parser.add_argument('--flowsize', type=int, default=None,
                        help='Mean flow size in bytes')
    parser.add_argument('--cores', type=int, default=None,
                        help='Number of core switches')
    parser.add_argument('--leaves', type=int, default=None,
                        help='Number of leaf switches')
    parser.add_argument('--servers', type=int, default=None,
                        help='Servers per leaf switch')
    parser.add_argument('--strategy', choices=['random', 'round_robin'], default=None,
                        help='Core selection strategy')
    parser.add_argument('--interactive', action='store_true',
                        help='Ask before every batch of events')
    parser.add_argument('--batch', type=int, default=None,
                        help='Events per batch in interactive mode')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed')
    parser.add_argument('--log-queues', action='store_true',
                        help='Attach a sampling logger to every queue')
    parser.add_argument('--log-traffic', action='store_true',
                        help='Log every packet at every queue and pipe it passes')
    parser.add_argument('--log-level', choices=LOG_LEVELS, default=None,
                        help='Console logging level')
    return parser


def config_from_args(args: argparse.Namespace) -> TestbedConfig:
    """Build a TestbedConfig from parsed arguments; flags override key=value pairs"""
    config = TestbedConfig()
    config.apply_key_values(args.params)

    overrides = {
        'log_file': args.output,
        'duration': args.duration,
        'load': args.load,
        'flow_size': args.flowsize,
        'core_count': args.cores,
        'leaf_count': args.leaves,
        'servers_per_leaf': args.servers,
        'core_selection': args.strategy,
        'batch_size': args.batch,
        'seed': args.seed,
        'log_level': args.log_level,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    if args.interactive:
        config.interactive = True
    if args.log_queues:
        config.log_queues = True
    if args.log_traffic:
        config.log_traffic = True
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()
    except ConfigurationError as e:
        parser.error(str(e))

    logging.basicConfig(level=getattr(logging, config.log_level.upper()),
                        format='%(asctime)s - %(levelname)s - %(message)s')

    console = Console()
    eventlist = EventList.get_the_event_list()
    console.print(f"Logging to {config.log_file}")
    logfile = Logfile(config.log_file, eventlist)
    try:
        run = conga_testbed(config, logfile, eventlist, console=console)
    finally:
        logfile.close()

    print_summary(run, eventlist, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
