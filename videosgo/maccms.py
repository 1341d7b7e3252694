"""Client for the MacCMS video collection API."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

import requests

from videosgo import logger

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
MAX_PAGES = 1000
SUCCESS_CODES = (1, 200)

_INT_ITEM_FIELDS = frozenset({"vod_id", "type_id", "vod_status"})


class MacCMSError(Exception):
    """Raised when a MacCMS API request fails or returns an error."""


class RateLimiter:
    """Token bucket allowing ``burst`` requests at once and one per ``interval`` seconds after that."""

    def __init__(
        self,
        interval: float = 0.1,
        burst: int = 10,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._interval = interval
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until a request may go out and return the time waited."""
        if self._interval <= 0:
            return 0.0
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._last)
            self._tokens = min(float(self._burst), self._tokens + elapsed / self._interval)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens * self._interval if self._tokens < 0 else 0.0
        if delay > 0:
            self._sleep(delay)
        return delay


_shared_limiter = RateLimiter()


def _check_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name!r} must be an integer, got {value!r}")
    return value


def _check_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string, got {value!r}")
    return value


@dataclass
class VideoItem:
    """One video entry as returned by the MacCMS API."""

    vod_id: int = 0
    type_id: int = 0
    type_name: str = ""
    vod_name: str = ""
    vod_sub: str = ""
    vod_en: str = ""
    vod_status: int = 0
    vod_pic: str = ""
    vod_tags: str = ""
    vod_class: str = ""
    vod_remark: str = ""
    vod_year: str = ""
    vod_area: str = ""
    vod_lang: str = ""
    vod_director: str = ""
    vod_actor: str = ""
    vod_content: str = ""
    vod_play_from: str = ""
    vod_play_url: str = ""
    vod_play_note: str = ""
    vod_down_from: str = ""
    vod_down_url: str = ""
    vod_time: str = ""
    vod_time_add: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> VideoItem:
        """Build an item from decoded JSON; raises ValueError on mistyped fields."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"video item must be an object, got {data!r}")
        values: dict[str, Any] = {}
        for item_field in fields(cls):
            value = data.get(item_field.name)
            if value is None:
                continue
            if item_field.name in _INT_ITEM_FIELDS:
                values[item_field.name] = _check_int(item_field.name, value)
            else:
                values[item_field.name] = _check_str(item_field.name, value)
        return cls(**values)

    def is_valid(self) -> bool:
        """Whether the entry has an id and a name."""
        return self.vod_id > 0 and self.vod_name != ""

    def has_play_links(self) -> bool:
        """Whether the entry carries play sources and play URLs."""
        return self.vod_play_from != "" and self.vod_play_url != ""


@dataclass
class VideoListResponse:
    """A page of the video list."""

    code: int = 0
    msg: str = ""
    page: int = 0
    page_count: int = 0
    total: int = 0
    items: list[VideoItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> VideoListResponse:
        """Build a response from decoded JSON; raises ValueError on mistyped fields."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"response must be an object, got {type(data).__name__}")
        response = cls()
        for key, attr in (("code", "code"), ("page", "page"), ("pagecount", "page_count"), ("total", "total")):
            if data.get(key) is not None:
                setattr(response, attr, _check_int(key, data[key]))
        if data.get("msg") is not None:
            response.msg = _check_str("msg", data["msg"])
        raw_list = data.get("list")
        if raw_list is not None:
            if not isinstance(raw_list, list):
                raise ValueError("field 'list' must be an array")
            response.items = [VideoItem.from_dict(entry) for entry in raw_list]
        return response


def _error_message(body: bytes) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return ""
    if isinstance(data, dict):
        msg = data.get("msg")
        if isinstance(msg, str):
            return msg
    return ""


class MacCMSClient:
    """Fetches video lists and details from a MacCMS collection endpoint."""

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
        page_delay: float = 0.5,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or _shared_limiter
        self.page_delay = page_delay

    def _get(self, url: str, failure: str, status_failure: str) -> bytes:
        try:
            response = self.session.get(
                url,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MacCMSError(f"{failure}: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise MacCMSError(f"{status_failure}: {response.status_code}")
            return response.content

    def fetch_video_list(
        self, api_url: str, api_key: str = "", incremental: bool = False, page: int = 0
    ) -> VideoListResponse:
        """Fetch one page of the video list, keeping only usable entries."""
        self.rate_limiter.wait()

        url = f"{api_url.removesuffix('/')}?ac=videolist"
        if api_key:
            url += f"&acode={api_key}"
        if incremental:
            url += "&h=24"
        if page > 0:
            url += f"&pg={page}"
        logger.debug("[MacCMS] 请求 URL: %s", url)

        body = self._get(url, "请求 MacCMS API 失败", "MacCMS API 返回状态码")
        if not body:
            raise MacCMSError("API 返回空响应")

        try:
            result = VideoListResponse.from_dict(json.loads(body))
        except ValueError as exc:
            msg = _error_message(body)
            if msg:
                raise MacCMSError(f"API 返回错误: {msg}") from exc
            preview = body[:200].decode("utf-8", errors="replace")
            raise MacCMSError(f"解析 JSON 失败: {exc}, 响应内容: {preview}") from exc

        if result.code not in SUCCESS_CODES:
            raise MacCMSError(f"MacCMS API 错误: {result.msg} (code: {result.code})")

        valid = []
        for item in result.items:
            if item.is_valid() and item.has_play_links():
                valid.append(item)
            else:
                logger.warning("[MacCMS] 跳过无效视频条目: ID=%d, Name=%s", item.vod_id, item.vod_name)
        result.items = valid
        logger.debug("[MacCMS] 获取到 %d 条有效视频数据 (总计: %d)", len(valid), result.total)
        return result

    def fetch_all_pages(self, api_url: str, api_key: str = "", incremental: bool = False) -> list[VideoItem]:
        """Fetch every page of the video list, up to the page limit."""
        items: list[VideoItem] = []
        page = 1
        while True:
            if page > MAX_PAGES:
                logger.warning("[MacCMS] 达到最大页数限制 (%d)，停止采集", MAX_PAGES)
                break
            try:
                result = self.fetch_video_list(api_url, api_key, incremental, page)
            except MacCMSError as exc:
                raise MacCMSError(f"获取第 {page} 页失败: {exc}") from exc

            items.extend(result.items)
            logger.info("[MacCMS] 已获取第 %d/%d 页，共 %d 条数据", page, result.page_count, len(result.items))

            if page >= result.page_count or result.page_count == 0:
                break
            page += 1
            if self.page_delay > 0:
                time.sleep(self.page_delay)

        logger.info("[MacCMS] 采集完成，共获取 %d 条视频数据", len(items))
        return items

    def fetch_video_detail(self, api_url: str, api_key: str, vod_id: int) -> VideoItem:
        """Fetch the detail entry of a single video."""
        self.rate_limiter.wait()

        url = f"{api_url.removesuffix('/')}?ac=detail&ids={vod_id}"
        if api_key:
            url += f"&acode={api_key}"

        body = self._get(url, "请求详情失败", "API 返回状态码")
        try:
            result = VideoListResponse.from_dict(json.loads(body))
        except ValueError as exc:
            raise MacCMSError(f"解析 JSON 失败: {exc}") from exc

        if result.code not in SUCCESS_CODES:
            raise MacCMSError(f"API 错误: {result.msg}")
        if not result.items:
            raise MacCMSError("视频不存在")
        return result.items[0]