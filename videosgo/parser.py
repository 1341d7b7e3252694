"""Parsing of MacCMS play-group strings and their stored JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

GROUP_SEPARATOR = "$$$"
LINK_SEPARATOR = "#"
EPISODE_SEPARATOR = "$"
DEFAULT_GROUP_NAME = "默认"


@dataclass
class PlayGroup:
    """A named play line holding a list of episode links."""

    group_name: str
    links: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"group_name": self.group_name, "links": list(self.links)}


def _split_links(text: str, separator: str) -> list[str]:
    return [link for link in (part.strip() for part in text.split(separator)) if link]


def parse_play_groups(play_from: str, play_url: str) -> list[PlayGroup]:
    """Pair ``$$$``-separated group names with ``$$$``-separated ``#`` link lists."""
    if not play_from or not play_url:
        return []
    groups = []
    for raw_name, raw_urls in zip(play_from.split(GROUP_SEPARATOR), play_url.split(GROUP_SEPARATOR)):
        name = raw_name.strip()
        urls = raw_urls.strip()
        if not name or not urls:
            continue
        links = _split_links(urls, LINK_SEPARATOR)
        if links:
            groups.append(PlayGroup(name, links))
    return groups


def filter_m3u8(groups: list[PlayGroup]) -> list[PlayGroup]:
    """Keep only links ending in ``.m3u8`` and drop groups left empty."""
    filtered = []
    for group in groups:
        links = [link for link in group.links if link.lower().endswith(".m3u8")]
        if links:
            filtered.append(PlayGroup(group.group_name, links))
    return filtered


def _encode(group: PlayGroup) -> str:
    text = json.dumps(group.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def to_jsonb_array(groups: list[PlayGroup]) -> list[str]:
    """Serialise each group to a compact JSON object string."""
    return [_encode(group) for group in groups]


def _decode(item: str) -> PlayGroup | None:
    try:
        data = json.loads(item)
    except (ValueError, TypeError):
        return None
    if not isinstance(data, dict):
        return None
    name = data.get("group_name")
    links = data.get("links")
    if name is None:
        name = ""
    if links is None:
        links = []
    if not isinstance(name, str) or not isinstance(links, list):
        return None
    if not all(isinstance(link, str) for link in links):
        return None
    return PlayGroup(name, list(links))


def parse_play_url_from_jsonb(jsonb_array: list[str]) -> list[PlayGroup]:
    """Decode stored JSON group strings, skipping any that do not parse."""
    return [group for group in map(_decode, jsonb_array) if group is not None]


def extract_episode_name(link: str) -> str:
    """Return the episode name of a ``name$url`` link, or an empty string."""
    parts = link.split(EPISODE_SEPARATOR)
    return parts[0] if len(parts) >= 2 else ""


def extract_url(link: str) -> str:
    """Return the URL part of a ``name$url`` link, or the link itself."""
    parts = link.split(EPISODE_SEPARATOR)
    return parts[1] if len(parts) >= 2 else link


def parse_episode_links(episode_str: str) -> list[PlayGroup]:
    """Parse ``name$url#name$url`` into a single default group."""
    if not episode_str:
        return []
    links = _split_links(episode_str, LINK_SEPARATOR)
    return [PlayGroup(DEFAULT_GROUP_NAME, links)] if links else []


def format_play_links(groups: list[PlayGroup]) -> dict[str, list[dict[str, str]]]:
    """Map each group name to its episodes as ``{"name", "url"}`` entries."""
    result: dict[str, list[dict[str, str]]] = {}
    for group in groups:
        episodes = []
        for number, link in enumerate(group.links, start=1):
            name = extract_episode_name(link) or f"第{number}集"
            episodes.append({"name": name, "url": extract_url(link)})
        result[group.group_name] = episodes
    return result