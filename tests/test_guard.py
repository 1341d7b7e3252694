import threading

import pytest

from videosgo.guard import OracleGuard, OracleGuardConfig, decide


class FakeProcess:
    def __init__(self, args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.pid = 4242
        self.killed = False
        self.waited = False

    def poll(self):
        return 0 if self.killed else None

    def kill(self):
        self.killed = True

    def wait(self):
        self.waited = True
        return 0


class FakePopen:
    def __init__(self):
        self.processes = []

    def __call__(self, args, **kwargs):
        process = FakeProcess(args, **kwargs)
        self.processes.append(process)
        return process


def make_guard(cpu, mem, *, available=True, config=None, popen=None):
    values = {"cpu": cpu, "mem": mem}
    popen = popen or FakePopen()
    guard = OracleGuard(
        config or OracleGuardConfig(),
        cpu_sampler=lambda: values["cpu"],
        mem_sampler=lambda: values["mem"],
        which=lambda name: f"/usr/bin/{name}" if available else None,
        popen=popen,
        initial_delay=0.0,
    )
    return guard, values, popen


def test_default_config_values():
    config = OracleGuardConfig()
    assert config.idle_cpu_threshold == 15.0
    assert config.busy_cpu_threshold == 30.0
    assert config.lookbusy_mem == "6GB"
    assert config.check_interval == 300.0


def test_decide_idle_runs():
    should_run, reason = decide(5.0, 10.0, OracleGuardConfig())
    assert should_run is True
    assert reason.startswith("系统空闲")


def test_decide_memory_pressure_wins_over_idle_cpu():
    should_run, reason = decide(1.0, 90.0, OracleGuardConfig())
    assert should_run is False
    assert reason.startswith("内存紧张")


def test_decide_busy_cpu_stops():
    should_run, reason = decide(80.0, 10.0, OracleGuardConfig())
    assert should_run is False
    assert reason.startswith("业务繁忙")


def test_decide_gray_zone_has_no_reason():
    assert decide(20.0, 10.0, OracleGuardConfig()) == (False, "")
    assert decide(5.0, 50.0, OracleGuardConfig()) == (False, "")


def test_check_and_adjust_starts_lookbusy_when_idle():
    guard, _, popen = make_guard(5.0, 10.0)
    guard.check_and_adjust()
    assert guard.is_lookbusy_running() is True
    assert popen.processes[0].args == ["nice", "-n", "19", "lookbusy", "-c", "15", "-m", "6GB"]
    stats = guard.get_stats()
    assert stats["start_count"] == 1
    assert stats["last_cpu"] == 5.0
    assert stats["last_mem_used"] == 10.0


def test_check_and_adjust_does_not_start_twice():
    guard, _, popen = make_guard(5.0, 10.0)
    guard.check_and_adjust()
    guard.check_and_adjust()
    assert len(popen.processes) == 1
    assert guard.get_stats()["start_count"] == 1


def test_check_and_adjust_stops_when_busy():
    guard, values, popen = make_guard(5.0, 10.0)
    guard.check_and_adjust()
    values["cpu"] = 90.0
    guard.check_and_adjust()
    assert guard.is_lookbusy_running() is False
    assert popen.processes[0].killed is True
    assert popen.processes[0].waited is True
    assert guard.get_stats()["stop_count"] == 1


def test_gray_zone_stops_running_lookbusy():
    guard, values, _ = make_guard(5.0, 10.0)
    guard.check_and_adjust()
    values["cpu"] = 20.0
    guard.check_and_adjust()
    assert guard.is_lookbusy_running() is False


def test_unavailable_lookbusy_is_not_started():
    guard, _, popen = make_guard(5.0, 10.0, available=False)
    assert guard.is_lookbusy_available() is False
    guard.check_and_adjust()
    assert popen.processes == []
    assert guard.is_lookbusy_running() is False


def test_start_failure_leaves_nothing_running():
    def failing_popen(args, **kwargs):
        raise OSError("cannot start")

    guard = OracleGuard(
        cpu_sampler=lambda: 1.0,
        mem_sampler=lambda: 1.0,
        which=lambda name: "/usr/bin/lookbusy",
        popen=failing_popen,
    )
    guard.check_and_adjust()
    assert guard.is_lookbusy_running() is False
    assert guard.get_stats()["start_count"] == 0


def test_sampler_error_skips_adjustment():
    def broken():
        raise OSError("no proc")

    popen = FakePopen()
    guard = OracleGuard(cpu_sampler=broken, mem_sampler=lambda: 1.0, which=lambda n: "/x", popen=popen)
    guard.check_and_adjust()
    assert popen.processes == []


def test_disabled_guard_does_not_start():
    guard, _, _ = make_guard(5.0, 10.0, config=OracleGuardConfig(enabled=False))
    guard.start()
    assert guard.get_stats()["running"] is False
    assert guard.get_stats()["enabled"] is False


def test_start_runs_checks_and_stop_cleans_up():
    checked = threading.Event()
    popen = FakePopen()

    def cpu():
        checked.set()
        return 5.0

    guard = OracleGuard(
        OracleGuardConfig(check_interval=0.01),
        cpu_sampler=cpu,
        mem_sampler=lambda: 10.0,
        which=lambda name: "/usr/bin/lookbusy",
        popen=popen,
        initial_delay=0.0,
    )
    guard.start()
    assert checked.wait(5.0) is True
    assert guard.get_stats()["running"] is True
    guard.stop()
    stats = guard.get_stats()
    assert stats["running"] is False
    assert stats["lookbusy_running"] is False
    assert all(process.killed for process in popen.processes)


@pytest.mark.parametrize("cpu,mem", [(40.0, 10.0), (5.0, 80.0)])
def test_no_start_under_load(cpu, mem):
    guard, _, popen = make_guard(cpu, mem)
    guard.check_and_adjust()
    assert popen.processes == []