"""Liveness probing of m3u8 play links with HTTP HEAD requests."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import requests

from videosgo import logger
from videosgo.parser import PlayGroup

SERIAL_LIMIT = 3


@dataclass(frozen=True)
class ProbeStats:
    """Counts of probed, alive and dead links."""

    total: int = 0
    alive: int = 0
    dead: int = 0


class Probe:
    """Checks that play links answer a HEAD request with status 200."""

    def __init__(self, timeout: float = 5.0, workers: int = 10, *, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.workers = workers
        self.session = session or requests.Session()

    def _is_alive(self, url: str) -> bool:
        try:
            response = self.session.head(url, allow_redirects=False, timeout=self.timeout)
        except (requests.RequestException, ValueError):
            return False
        with response:
            return response.status_code == 200

    def _probe_links(self, links: list[str]) -> list[str]:
        if not links:
            return []
        if len(links) <= SERIAL_LIMIT:
            return [link for link in links if self._is_alive(link)]
        if self.workers < 1:
            return []
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            results = list(pool.map(self._is_alive, links))
        return [link for link, alive in zip(links, results) if alive]

    def filter_alive_links(self, groups: list[PlayGroup]) -> list[PlayGroup]:
        """Keep only alive links and drop groups left with none."""
        alive_groups = []
        for group in groups:
            alive = self._probe_links(group.links)
            if alive:
                alive_groups.append(PlayGroup(group.group_name, alive))
        return alive_groups

    def probe_single(self, url: str) -> bool:
        """Whether a single link is alive."""
        return self._is_alive(url)

    def probe_with_stats(self, groups: list[PlayGroup]) -> tuple[list[PlayGroup], ProbeStats]:
        """Filter alive links and report how many survived."""
        total = sum(len(group.links) for group in groups)
        alive_groups = self.filter_alive_links(groups)
        alive = sum(len(group.links) for group in alive_groups)
        stats = ProbeStats(total=total, alive=alive, dead=total - alive)
        logger.info("[探活] 总计=%d, 存活=%d, 失效=%d", stats.total, stats.alive, stats.dead)
        return alive_groups, stats