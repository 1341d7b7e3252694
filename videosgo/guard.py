"""Keeps an idle server busy with lookbusy while CPU and memory are quiet."""

from __future__ import annotations

import shutil
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import psutil

from videosgo import logger

LOOKBUSY = "lookbusy"
STOP_REASON = "服务停止"


@dataclass
class OracleGuardConfig:
    """Thresholds and lookbusy parameters of the guard (percentages and seconds)."""

    idle_cpu_threshold: float = 15.0
    busy_cpu_threshold: float = 30.0
    idle_mem_threshold: float = 40.0
    max_mem_usage: float = 70.0
    lookbusy_cpu: str = "15"
    lookbusy_mem: str = "6GB"
    lookbusy_nice: int = 19
    check_interval: float = 300.0
    enabled: bool = True


def decide(cpu_percent: float, mem_percent: float, config: OracleGuardConfig) -> tuple[bool, str]:
    """Return whether lookbusy should run and the reason for that decision.

    Memory pressure wins over everything, then a busy CPU; lookbusy runs only
    when both CPU and memory are idle. Anything in between means "not running"
    with an empty reason.
    """
    if mem_percent > config.max_mem_usage:
        return False, f"内存紧张 ({mem_percent:.1f}% > {config.max_mem_usage:.1f}%)"
    if cpu_percent > config.busy_cpu_threshold:
        return False, f"业务繁忙 (CPU {cpu_percent:.1f}% > {config.busy_cpu_threshold:.1f}%)"
    if cpu_percent < config.idle_cpu_threshold and mem_percent < config.idle_mem_threshold:
        return True, (
            f"系统空闲 (CPU {cpu_percent:.1f}% < {config.idle_cpu_threshold:.1f}%, "
            f"内存 {mem_percent:.1f}% < {config.idle_mem_threshold:.1f}%)"
        )
    return False, ""


def _sample_cpu() -> float:
    return psutil.cpu_percent(interval=3)


def _sample_memory() -> float:
    return psutil.virtual_memory().percent


class OracleGuard:
    """Starts and stops a low-priority lookbusy process according to system load."""

    def __init__(
        self,
        config: OracleGuardConfig | None = None,
        *,
        cpu_sampler: Callable[[], float] = _sample_cpu,
        mem_sampler: Callable[[], float] = _sample_memory,
        which: Callable[[str], str | None] = shutil.which,
        popen: Callable[..., Any] = subprocess.Popen,
        initial_delay: float = 30.0,
    ) -> None:
        self.config = config or OracleGuardConfig()
        self._cpu_sampler = cpu_sampler
        self._mem_sampler = mem_sampler
        self._which = which
        self._popen = popen
        self.initial_delay = initial_delay

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._process: Any = None
        self._running = False

        self.last_cpu = 0.0
        self.last_mem_used = 0.0
        self.start_count = 0
        self.stop_count = 0

    def start(self) -> None:
        """Start the background monitoring thread, unless disabled or already running."""
        if not self.config.enabled:
            logger.info("[Oracle守护] 已禁用，跳过启动")
            return
        if not self.is_lookbusy_available():
            logger.warning("[Oracle守护] 警告：lookbusy 未安装，守护将仅监控不操作")
            logger.warning("[Oracle守护] 安装命令：sudo apt-get install lookbusy -y")

        with self._lock:
            if self._running:
                return
            self._running = True
            self._stop_event = threading.Event()
            self._thread = threading.Thread(target=self._run, args=(self._stop_event,), daemon=True)
            self._thread.start()

        logger.info(
            "[Oracle守护] 已启动（检查间隔：%ss，CPU阈值：%.1f%%/%.1f%%）",
            self.config.check_interval,
            self.config.idle_cpu_threshold,
            self.config.busy_cpu_threshold,
        )

    def stop(self) -> None:
        """Stop monitoring and make sure lookbusy is no longer running."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None

        self._stop_lookbusy(STOP_REASON)
        if thread is not None:
            thread.join()
        logger.info("[Oracle守护] 已停止")

    def _run(self, stop_event: threading.Event) -> None:
        if not stop_event.wait(self.initial_delay):
            while not stop_event.wait(self.config.check_interval):
                self.check_and_adjust()
        self._stop_lookbusy(STOP_REASON)

    def check_and_adjust(self) -> None:
        """Sample CPU and memory once and start or stop lookbusy accordingly."""
        try:
            current_cpu = self._cpu_sampler()
        except (psutil.Error, OSError) as exc:
            logger.error("[Oracle守护] 获取 CPU 失败: %s", exc)
            return
        try:
            current_mem = self._mem_sampler()
        except (psutil.Error, OSError) as exc:
            logger.error("[Oracle守护] 获取内存失败: %s", exc)
            return

        with self._lock:
            self.last_cpu = current_cpu
            self.last_mem_used = current_mem

        should_run, reason = decide(current_cpu, current_mem, self.config)
        is_running = self.is_lookbusy_running()
        if should_run and not is_running:
            self._start_lookbusy(reason)
        elif not should_run and is_running:
            self._stop_lookbusy(reason)
        else:
            logger.info(
                "[Oracle守护] 状态保持: CPU=%.1f%%, 内存=%.1f%%, lookbusy=%s",
                current_cpu,
                current_mem,
                is_running,
            )

    def is_lookbusy_available(self) -> bool:
        """Whether the lookbusy executable can be found on the path."""
        return self._which(LOOKBUSY) is not None

    def is_lookbusy_running(self) -> bool:
        """Whether a lookbusy process started by this guard is active."""
        with self._lock:
            return self._process is not None

    def _command(self) -> list[str]:
        return [
            "nice",
            "-n",
            str(self.config.lookbusy_nice),
            LOOKBUSY,
            "-c",
            self.config.lookbusy_cpu,
            "-m",
            self.config.lookbusy_mem,
        ]

    def _start_lookbusy(self, reason: str) -> None:
        if not self.is_lookbusy_available():
            logger.warning("[Oracle守护] 无法启动 lookbusy: 未安装")
            return
        with self._lock:
            if self._process is not None:
                return
            logger.info("[Oracle守护] 启动 lookbusy: %s", reason)
            try:
                process = self._popen(
                    self._command(),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as exc:
                logger.error("[Oracle守护] 启动 lookbusy 失败: %s", exc)
                return
            self._process = process
            self.start_count += 1
            logger.info(
                "[Oracle守护] lookbusy 已启动 (PID: %s, CPU: %s, 内存: %s, Nice: %d)",
                getattr(process, "pid", None),
                self.config.lookbusy_cpu,
                self.config.lookbusy_mem,
                self.config.lookbusy_nice,
            )

    def _stop_lookbusy(self, reason: str) -> None:
        with self._lock:
            process = self._process
            if process is None:
                return
            logger.info("[Oracle守护] 关闭 lookbusy: %s", reason)
            if process.poll() is None:
                try:
                    process.kill()
                    process.wait()
                except OSError:
                    pass
            self._process = None
            self.stop_count += 1
            logger.info("[Oracle守护] lookbusy 已关闭，资源已释放")

    def get_stats(self) -> dict[str, Any]:
        """Return a snapshot of the guard's state and counters."""
        with self._lock:
            return {
                "enabled": self.config.enabled,
                "running": self._running,
                "lookbusy_running": self._process is not None,
                "last_cpu": self.last_cpu,
                "last_mem_used": self.last_mem_used,
                "start_count": self.start_count,
                "stop_count": self.stop_count,
                "config": self.config,
                "threads": threading.active_count(),
            }