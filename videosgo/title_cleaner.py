"""Title normalisation and fuzzy matching used to merge the same video from several sources."""

from __future__ import annotations

import re
from bisect import bisect_right

_WS = r"[\t\n\f\r ]"

_SUFFIX_PATTERNS = [
    # picture quality
    "HD", "hd", "Hd",
    "1080[Pp]", "720[Pp]", "480[Pp]", "4[Kk]", "2160[Pp]",
    "蓝光", "蓝光原盘", "BD", "bd", "Bd",
    "TC版", "TS版", "HDTC", "HDT[Cc]", "CAM",
    "60帧", "60fps", "120帧", "120fps",
    "高清", "超清", "标清", "极速",
    "HDR", "hdr", "Dolby", "dolby", "杜比", "IMAX", "imax",
    # language
    "国语", "中字", "中英双字", "双语", "双字幕",
    "日语", "英语", "韩语", "粤语", "川话", "东北话",
    "台语", "闽南语", "泰语", "法语", "德语", "俄语",
    "日语中字", "英语中字", "韩语中字",
    # edition
    "无删减", "加长版", "导演剪辑版", "未删减", "完整版",
    "院线版", "网络版", "电视版", "DVD版", "Blu-ray",
    "修复版", "重制版", "珍藏版", "终极版",
    # status
    "完结", "更新至.*", "连载中",
    "正片", "预告片", "花絮", "片段", "特辑",
    # episode markers
    "第[零一二三四五六七八九十百千万0-9]+集",
    "第[零一二三四五六七八九十百千万0-9]+期",
    "EP?[0-9]+", "ep?[0-9]+",
    # other
    "全集", "合集", "OVA", "ova",
    "电影版", "剧场版", "番外篇", "前传", "后传",
    "会员版", "付费版", "抢先看",
]

_PREFIX_PATTERNS = [
    r"^【.*?】",
    r"^《.*?》",
    r"^\[.*?\]",
    r"^正片",
    r"^HD",
    r"^[（(].*?[）)]",
]

_YEAR_RE = re.compile(rf"(?:\(([0-9]{{4}})\)|([0-9]{{4}})年|[\t\n\f\r \-_]([0-9]{{4}})[\t\n\f\r \-_])")
_SEASON_RE = re.compile(r"(?i)第([零一二三四五六七八九十0-9]+)季|S([0-9]+)|Season[\t\n\f\r ]*([0-9]+)")
_EPISODE_RE = re.compile(
    r"(?i)第([零一二三四五六七八九十百千万0-9]+)[集期]|EP?([0-9]+)|第([零一二三四五六七八九十百千万0-9]+)话"
)
_MULTI_DOT_RE = re.compile(r"\.{2,}")
_LONE_DOT_RE = re.compile(rf"{_WS}+\.{_WS}+")

SAME_VIDEO_THRESHOLD = 0.7

_CHINESE_DIGITS = {
    "零": 0, "一": 1, "二": 2, "三": 3, "四": 4,
    "五": 5, "六": 6, "七": 7, "八": 8, "九": 9,
    "十": 10, "百": 100, "千": 1000, "万": 10000,
}

# Code point ranges of the Han script (inclusive bounds).
_HAN_RANGES = [
    (0x2E80, 0x2E99), (0x2E9B, 0x2EF3), (0x2F00, 0x2FD5), (0x3005, 0x3005),
    (0x3007, 0x3007), (0x3021, 0x3029), (0x3038, 0x303B), (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF), (0xF900, 0xFA6D), (0xFA70, 0xFAD9), (0x16FE2, 0x16FE3),
    (0x16FF0, 0x16FF1), (0x20000, 0x2A6DF), (0x2A700, 0x2B739), (0x2B740, 0x2B81D),
    (0x2B820, 0x2CEA1), (0x2CEB0, 0x2EBE0), (0x2EBF0, 0x2EE5D), (0x2F800, 0x2FA1D),
    (0x30000, 0x3134A), (0x31350, 0x323AF),
]
_HAN_STARTS = [start for start, _ in _HAN_RANGES]


class TitleCleaner:
    """Strips quality, language, edition and episode noise from video titles."""

    def __init__(self) -> None:
        self._suffix_patterns = [re.compile(p) for p in _SUFFIX_PATTERNS]
        self._prefix_patterns = [re.compile(p) for p in _PREFIX_PATTERNS]

    def clean(self, title: str) -> str:
        """Return the lower-cased core title used for comparisons."""
        if not title:
            return ""
        result = to_half_width(title)
        for pattern in self._prefix_patterns:
            result = pattern.sub("", result)
        for pattern in self._suffix_patterns:
            result = pattern.sub("", result)
        result = _YEAR_RE.sub("", result)
        for symbol in ("-", "_", "|", "·"):
            result = result.replace(symbol, " ")
        result = _MULTI_DOT_RE.sub(" ", result)
        result = _LONE_DOT_RE.sub(" ", result)
        return " ".join(result.split()).lower()

    def extract_year(self, title: str) -> int:
        """Return a year between 1900 and 2100 found in the title, or 0."""
        match = _YEAR_RE.search(title)
        if match is None:
            return 0
        for group in match.groups():
            if group:
                year = int(group)
                if 1900 <= year <= 2100:
                    return year
        return 0

    def extract_season(self, title: str) -> int:
        """Return the season number found in the title, or 0."""
        return _first_number(_SEASON_RE, title)

    def extract_episode(self, title: str) -> int:
        """Return the episode number found in the title, or 0."""
        return _first_number(_EPISODE_RE, title)

    def is_same_video(self, title1: str, title2: str) -> bool:
        """Whether the two titles are similar enough to be one video."""
        return self.similarity(title1, title2) > SAME_VIDEO_THRESHOLD

    def similarity(self, title1: str, title2: str) -> float:
        """Weighted edit-distance and bigram Jaccard similarity of the cleaned titles."""
        clean1 = self.clean(title1)
        clean2 = self.clean(title2)
        if not clean1 or not clean2:
            return 0.0
        if clean1 == clean2:
            return 1.0
        max_len = max(len(clean1.encode("utf-8")), len(clean2.encode("utf-8")))
        edit_similarity = 1.0 - levenshtein_distance(clean1, clean2) / max_len
        return edit_similarity * 0.4 + jaccard_similarity(clean1, clean2) * 0.6


def _first_number(pattern: re.Pattern[str], title: str) -> int:
    match = pattern.search(title)
    if match is None:
        return 0
    for group in match.groups():
        if group:
            return chinese_num_to_int(group)
    return 0


def levenshtein_distance(s1: str | bytes, s2: str | bytes) -> int:
    """Edit distance between the UTF-8 encodings of two strings."""
    a = s1.encode("utf-8") if isinstance(s1, str) else s1
    b = s2.encode("utf-8") if isinstance(s2, str) else s2
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, byte_a in enumerate(a, start=1):
        curr = [i]
        for j, byte_b in enumerate(b, start=1):
            cost = 0 if byte_a == byte_b else 1
            curr.append(min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]


def jaccard_similarity(s1: str, s2: str) -> float:
    """Jaccard similarity of the character bigrams of two strings."""
    bigrams1 = extract_bigrams(s1)
    bigrams2 = extract_bigrams(s2)
    if not bigrams1 and not bigrams2:
        return 1.0
    if not bigrams1 or not bigrams2:
        return 0.0
    remaining = set(bigrams2)
    intersection = 0
    for bigram in bigrams1:
        if bigram in remaining:
            intersection += 1
            remaining.discard(bigram)
    union = len(bigrams1) + len(bigrams2) - intersection
    return intersection / union if union else 0.0


def extract_bigrams(s: str) -> list[str]:
    """Return every pair of adjacent characters, in order."""
    return [s[i : i + 2] for i in range(len(s) - 1)]


def to_half_width(s: str) -> str:
    """Convert full-width digits, Latin letters and the ideographic space to ASCII."""
    chars = []
    for ch in s:
        code = ord(ch)
        if ch == "\u3000":
            chars.append(" ")
        elif 0xFF10 <= code <= 0xFF19:
            chars.append(chr(code - 0xFF10 + ord("0")))
        elif 0xFF21 <= code <= 0xFF3A:
            chars.append(chr(code - 0xFF21 + ord("A")))
        elif 0xFF41 <= code <= 0xFF5A:
            chars.append(chr(code - 0xFF41 + ord("a")))
        else:
            chars.append(ch)
    return "".join(chars)


def chinese_num_to_int(s: str) -> int:
    """Convert an ASCII or Chinese numeral to an integer."""
    if all("0" <= ch <= "9" for ch in s):
        result = 0
        for ch in s:
            result = result * 10 + ord(ch) - ord("0")
        return result

    if s[0] == "十":
        value = 10
        if len(s) > 1:
            digit = _CHINESE_DIGITS.get(s[1])
            if digit is not None and digit < 10:
                value += digit
        return value

    result = 0
    unit = 0
    for ch in s:
        value = _CHINESE_DIGITS.get(ch)
        if value is None:
            continue
        if value >= 10:
            if value == 10000:
                result = (result + unit) * value
                unit = 0
            else:
                unit = value
        else:
            result += value * (unit or 1)
            unit = 0
    return result + unit


def is_chinese(ch: str) -> bool:
    """Whether the character belongs to the Han script."""
    code = ord(ch)
    index = bisect_right(_HAN_STARTS, code) - 1
    return index >= 0 and code <= _HAN_RANGES[index][1]