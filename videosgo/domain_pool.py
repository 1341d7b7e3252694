"""Extraction of CDN domain pools from m3u8 play links that share a path."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from videosgo.parser import PlayGroup


@dataclass(frozen=True)
class PlayLink:
    """A play link together with the name of the source it came from."""

    source_name: str
    m3u8_url: str


def _fallback_split(m3u8_url: str) -> tuple[str, str]:
    idx = m3u8_url.find("://")
    if idx <= 0:
        return "", ""
    rest = m3u8_url[idx + 3 :]
    slash = rest.find("/")
    if slash > 0:
        return rest[:slash], rest[slash:]
    return rest, ""


def extract_from_m3u8(m3u8_url: str) -> tuple[str, str]:
    """Split an m3u8 URL into its host (without port) and its path."""
    if not m3u8_url:
        return "", ""
    try:
        parts = urlsplit(m3u8_url)
    except ValueError:
        return _fallback_split(m3u8_url)

    domain = parts.netloc.rpartition("@")[2]
    path = unquote(parts.path)

    colon = domain.rfind(":")
    if colon > 0 and "]" not in domain[colon:]:
        domain = domain[:colon]
    return domain, path


def extract_from_play_links(links: list[PlayLink]) -> tuple[list[str], str]:
    """Return the distinct domains and shared path when all links share a path.

    A single usable link yields its own domain and path; links whose paths
    differ cannot be mixed and yield an empty pool.
    """
    parsed = []
    for link in links:
        if not link.m3u8_url:
            continue
        domain, path = extract_from_m3u8(link.m3u8_url)
        if domain:
            parsed.append((domain, path))

    if not parsed:
        return [], ""
    if len(parsed) == 1:
        return [parsed[0][0]], parsed[0][1]

    first_path = parsed[0][1]
    if any(path != first_path for _, path in parsed[1:]):
        return [], ""
    return list(dict.fromkeys(domain for domain, _ in parsed)), first_path


def extract_domains_from_play_groups(groups: list[PlayGroup]) -> tuple[list[str], str]:
    """Build the domain pool from every link of every play group."""
    links = [
        PlayLink(group.group_name, link.partition("$")[2] if "$" in link else link)
        for group in groups
        for link in group.links
    ]
    return extract_from_play_links(links)


def build_alternate_urls(domain_pool: list[str], shared_path: str, scheme: str = "https") -> list[str]:
    """Combine each pooled domain with the shared path into a full URL."""
    if not domain_pool or not shared_path:
        return []
    scheme = scheme or "https"
    return [f"{scheme}://{domain}{shared_path}" for domain in domain_pool]