"""Building and merging aggregated play lines and normalising collected video fields."""

from __future__ import annotations

import re
from dataclasses import dataclass

from videosgo.domain_pool import extract_from_m3u8
from videosgo.parser import PlayGroup

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class PlayLine:
    """One playable stream of a video, with its origin and detected attributes."""

    source_name: str
    m3u8_url: str
    domain: str = ""
    path: str = ""
    format: str = "m3u8"
    quality: str = ""
    language: str = ""


def _link_url(link: str) -> str:
    _, sep, rest = link.partition("$")
    return rest if sep else link


def build_play_lines(play_groups: list[PlayGroup], source_name: str = "") -> list[PlayLine]:
    """Turn every link of every play group into a play line named after its group."""
    lines = []
    for group in play_groups:
        for link in group.links:
            url = _link_url(link)
            domain, path = extract_from_m3u8(url)
            lines.append(
                PlayLine(
                    source_name=group.group_name,
                    m3u8_url=url,
                    domain=domain,
                    path=path,
                    format="m3u8",
                    quality=detect_quality(link),
                    language=detect_language(link),
                )
            )
    return lines


def merge_play_lines(existing: list[PlayLine], new_lines: list[PlayLine]) -> list[PlayLine]:
    """Append the new lines whose URL is not present yet, keeping the existing order."""
    merged = list(existing)
    seen = {line.m3u8_url for line in existing}
    for line in new_lines:
        if line.m3u8_url not in seen:
            merged.append(line)
            seen.add(line.m3u8_url)
    return merged


def detect_quality(link_text: str) -> str:
    """Guess the picture quality from the link text."""
    text = link_text.lower()
    if "4k" in text or "2160" in text:
        return "4K"
    if "1080" in text:
        return "1080P"
    if "720" in text:
        return "720P"
    if "480" in text:
        return "480P"
    return ""


def detect_language(link_text: str) -> str:
    """Guess the audio language from the link text."""
    text = link_text.lower()
    if "国语" in text or "中字" in text:
        return "国语"
    if "粤语" in text:
        return "粤语"
    if "英语" in text or "英文" in text:
        return "英语"
    if "日语" in text or "日文" in text:
        return "日语"
    if "韩语" in text or "韩文" in text:
        return "韩语"
    return ""


def normalize_title(title: str) -> str:
    """Collapse runs of whitespace and trim the ends."""
    return " ".join(title.split())


def parse_tags(tags_str: str) -> list[str]:
    """Split a comma-separated tag string, dropping blank entries."""
    return [tag for tag in (part.strip() for part in tags_str.split(",")) if tag]


def strip_html(s: str) -> str:
    """Remove everything between ``<`` and ``>`` and trim the result."""
    chars = []
    in_tag = False
    for ch in s:
        if ch == "<":
            in_tag = True
        elif ch == ">":
            in_tag = False
        elif not in_tag:
            chars.append(ch)
    return "".join(chars).strip()


def parse_year(s: str) -> int:
    """Parse a year between 0 and 9999, returning 0 for anything else."""
    if not _INTEGER_RE.fullmatch(s):
        return 0
    year = int(s)
    return year if 0 <= year <= 9999 else 0