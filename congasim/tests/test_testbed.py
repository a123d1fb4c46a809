"""
配置与测试平台入口测试
"""

import io

import pytest
from rich.console import Console

from congasim.api import TestbedConfig
from congasim.core.logger.base import Logger
from congasim.core.logger.logfile import Logfile
from congasim.datacenter import ConfigurationError, DriverState
from congasim.testbed import build_parser, config_from_args, conga_testbed, main, print_summary


def tiny_config(**overrides):
    config = TestbedConfig(duration=0.001, core_count=2, leaf_count=2, servers_per_leaf=2, seed=9)
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


class TestTestbedConfig:

    def test_defaults_are_the_reference_testbed(self):
        config = TestbedConfig()
        config.validate()

        assert (config.core_count, config.leaf_count, config.servers_per_leaf) == (12, 24, 32)
        assert config.total_servers() == 768
        assert config.target_rate() == pytest.approx(0.7 * 10e9)

    def test_key_value_parameters(self):
        config = TestbedConfig().apply_key_values(["duration=0.5", "utilization=0.25", "flowsize=2000"])

        assert config.duration == 0.5
        assert config.load == 0.25
        assert config.flow_size == 2000

    @pytest.mark.parametrize("arg", ["duration", "speed=10", "load=abc", "flowsize=1.5"])
    def test_bad_key_value_parameters(self, arg):
        with pytest.raises(ConfigurationError):
            TestbedConfig().apply_key_values([arg])

    @pytest.mark.parametrize("field, value", [
        ("duration", 0),
        ("duration", 1e-13),
        ("hop_delay_us", 1e-7),
        ("servers_per_leaf", 0),
        ("load", 0),
        ("load", 1.5),
        ("core_count", 0),
        ("batch_size", -1),
        ("core_selection", "ecmp"),
        ("log_level", "LOUD"),
    ])
    def test_validate_rejects(self, field, value):
        config = TestbedConfig()
        setattr(config, field, value)
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_validate_rejects_single_server_fabric(self):
        with pytest.raises(ConfigurationError, match="two servers"):
            tiny_config(leaf_count=1, servers_per_leaf=1).validate()
        tiny_config(leaf_count=1, servers_per_leaf=2).validate()

    def test_dict_round_trip(self):
        config = tiny_config(core_selection="round_robin")
        assert TestbedConfig.from_dict(config.to_dict()) == config

        with pytest.raises(ConfigurationError):
            TestbedConfig.from_dict({"cores": 4})


class TestCommandLine:

    def test_flags_override_key_values(self):
        args = build_parser().parse_args(["duration=2", "load=0.3", "--duration", "0.5",
                                          "--cores", "4", "--strategy", "round_robin",
                                          "--interactive", "--batch", "50"])
        config = config_from_args(args)

        assert config.duration == 0.5
        assert config.load == 0.3
        assert config.core_count == 4
        assert config.core_selection == "round_robin"
        assert config.interactive
        assert config.batch_size == 50

    def test_main_runs_a_small_fabric(self, tmp_path):
        output = tmp_path / "logout.dat"
        status = main(["--duration", "0.001", "--cores", "2", "--leaves", "2", "--servers", "2",
                       "--seed", "3", "-o", str(output)])

        assert status == 0
        assert output.exists()
        assert output.read_text().startswith("#")

    def test_main_rejects_bad_parameters(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["load=abc"])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("argv", [
        ["--leaves", "1", "--servers", "1", "--duration", "0.001"],
        ["--duration", "1e-13"],
    ])
    def test_main_rejects_unrunnable_fabric(self, argv, tmp_path):
        output = tmp_path / "logout.dat"
        with pytest.raises(SystemExit) as excinfo:
            main(argv + ["-o", str(output)])
        assert excinfo.value.code == 2
        assert not output.exists()

    def test_log_traffic_flag(self):
        assert config_from_args(build_parser().parse_args(["--log-traffic"])).log_traffic
        assert not config_from_args(build_parser().parse_args([])).log_traffic


class TestCongaTestbed:

    def test_run_completes_within_duration(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "run.dat"), eventlist)
        console = Console(file=io.StringIO(), width=120)
        try:
            run = conga_testbed(tiny_config(), logfile, eventlist, console=console)
        finally:
            logfile.close()

        assert run.state == DriverState.COMPLETED
        assert run.events_processed > 0
        assert eventlist.now() < 1_000_000_000
        gen = run.flow_generator
        assert gen.flows_started() > 0
        assert gen.flows_completed() + run.routes_released == gen.flows_started()
        assert gen.arena.live() == 0

        print_summary(run, eventlist, console)
        assert "Flows started" in console.file.getvalue()

    def test_operator_can_stop_the_run(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "run.dat"), eventlist)
        console = Console(file=io.StringIO())
        try:
            run = conga_testbed(tiny_config(interactive=True, batch_size=10), logfile, eventlist,
                                prompt=lambda text: "n", console=console)
        finally:
            logfile.close()

        assert run.state == DriverState.STOPPED
        assert run.events_processed == 10
        assert run.flow_generator.active_flows() == 0

    def test_invalid_config_is_rejected_before_building(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "run.dat"), eventlist)
        try:
            with pytest.raises(ConfigurationError):
                conga_testbed(tiny_config(load=2.0), logfile, eventlist)
        finally:
            logfile.close()
        assert eventlist.pending_count() == 0

    def test_traffic_is_logged_when_enabled(self, eventlist, tmp_path):
        logfile = Logfile(str(tmp_path / "run.dat"), eventlist)
        try:
            conga_testbed(tiny_config(log_traffic=True, log_switches=False), logfile, eventlist,
                          console=Console(file=io.StringIO()))
        finally:
            logfile.close()

        traffic = str(int(Logger.EventType.TRAFFIC_EVENT))
        with open(logfile.filename()) as f:
            types = {line.split()[1] for line in f if not line.startswith("#")}
        assert traffic in types
