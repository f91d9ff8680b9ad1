"""Asking online services for the best conversion of a pinyin string."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import quote

from .fetch import FetchThread, Request
from .lrucache import LRUCache

_log = logging.getLogger(__name__)

MAX_ERROR = 10
ERROR_RETRY_DELAY = 5 * 60.0
CACHE_SIZE = 2048

GOOGLE_URL = "https://www.google.com/inputtools/request?ime=pinyin&text="
GOOGLE_CN_URL = "https://www.google.cn/inputtools/request?ime=pinyin&text="
BAIDU_URL = "https://olime.baidu.com/py?rn=0&pn=1&ol=1&py="

CloudPinyinCallback = Callable[[str, str], None]


class CloudPinyinBackend(Enum):
    """Online services that can be asked."""

    GOOGLE = "Google"
    GOOGLE_CN = "GoogleCN"
    BAIDU = "Baidu"


@dataclass
class CloudPinyinConfig:
    """Settings of the cloud pinyin addon."""

    toggle_key: Tuple[str, ...] = ("Control+Alt+Shift+C",)
    minimum_length: int = 4
    backend: CloudPinyinBackend = CloudPinyinBackend.GOOGLE_CN
    proxy: str = ""


def _escape(pinyin: str) -> str:
    return quote(pinyin, safe="")


def _between(body: bytes, start_marker: bytes, end_marker: bytes) -> str:
    start = body.find(start_marker)
    if start < 0:
        return ""
    start += len(start_marker)
    end = body.find(end_marker, start)
    if end < 0 or end <= start:
        return ""
    return body[start:end].decode("utf-8", errors="replace")


class Backend(ABC):
    """Builds the request for one service and reads its answer."""

    @abstractmethod
    def prepare_request(self, request: Request, pinyin: str) -> None:
        """Fill in the URL to fetch for ``pinyin``."""

    @abstractmethod
    def parse_result(self, request: Request) -> str:
        """Extract the best candidate from a response, or an empty string."""


class GoogleBackend(Backend):
    """The input tools service, at a configurable address."""

    def __init__(self, url: str) -> None:
        self.url = url

    def prepare_request(self, request: Request, pinyin: str) -> None:
        request.url = self.url + _escape(pinyin)
        _log.debug("Request URL: %s", request.url)

    def parse_result(self, request: Request) -> str:
        body = request.result
        _log.debug("Request result: %r", body)
        return _between(body, b'",["', b'"')


class BaiduBackend(Backend):
    """The Baidu online input service."""

    def prepare_request(self, request: Request, pinyin: str) -> None:
        request.url = BAIDU_URL + _escape(pinyin)
        _log.debug("Request URL: %s", request.url)

    def parse_result(self, request: Request) -> str:
        body = request.result
        _log.debug("Request result: %r", body)
        return _between(body, b'[["', b'",')


class CloudPinyin:
    """Answers pinyin queries from a cache or from an online service.

    Queries that fail too often switch the service off until
    :meth:`reset_error` is called or five minutes have passed.
    """

    def __init__(
        self,
        config: Optional[CloudPinyinConfig] = None,
        fetcher: Optional[FetchThread] = None,
    ) -> None:
        self.config = config if config is not None else CloudPinyinConfig()
        self.backends: Dict[CloudPinyinBackend, Backend] = {
            CloudPinyinBackend.GOOGLE: GoogleBackend(GOOGLE_URL),
            CloudPinyinBackend.GOOGLE_CN: GoogleBackend(GOOGLE_CN_URL),
            CloudPinyinBackend.BAIDU: BaiduBackend(),
        }
        self.error_count = 0
        self._retry_at: Optional[float] = None
        self._cache: LRUCache[str, str] = LRUCache(CACHE_SIZE)
        self._lock = threading.RLock()
        self.fetcher = (
            fetcher
            if fetcher is not None
            else FetchThread(on_finished=self.process_finished)
        )

    @property
    def toggle_key(self) -> Tuple[str, ...]:
        """Keys that switch cloud pinyin on and off."""
        return self.config.toggle_key

    def _retry_if_due(self) -> None:
        if self._retry_at is not None and time.monotonic() >= self._retry_at:
            self.reset_error()

    def request(self, pinyin: str, callback: CloudPinyinCallback) -> None:
        """Look ``pinyin`` up; ``callback(pinyin, hanzi)`` gets the answer.

        The callback runs at once for short input, cached answers and when
        no request can be made; otherwise when the answer is processed.
        """
        if len(pinyin.encode("utf-8")) < self.config.minimum_length:
            callback(pinyin, "")
            return
        with self._lock:
            cached = self._cache.find(pinyin)
            self._retry_if_due()
            errors = self.error_count
        if cached is not None:
            callback(pinyin, cached)
            return
        backend = self.backends.get(self.config.backend)
        if backend is None or errors >= MAX_ERROR:
            callback(pinyin, "")
            return
        proxy = self.config.proxy

        def setup(request: Request) -> None:
            backend.prepare_request(request, pinyin)
            request.proxy = proxy
            request.pinyin = pinyin
            request.callback = callback

        if not self.fetcher.add_request(setup):
            callback(pinyin, "")

    def process_finished(self) -> int:
        """Deliver the answers of finished requests; return how many."""
        processed = 0
        with self._lock:
            backend = self.backends.get(self.config.backend)
            while (item := self.fetcher.pop_finished()) is not None:
                if item.http_code != 200:
                    self.error_count += 1
                    if self.error_count == MAX_ERROR:
                        _log.error(
                            "Cloud pinyin reaches max error. Retry in 5 minutes."
                        )
                        self._retry_at = time.monotonic() + ERROR_RETRY_DELAY
                hanzi = backend.parse_result(item) if backend is not None else ""
                if item.callback is not None:
                    item.callback(item.pinyin, hanzi)
                if hanzi:
                    self._cache.insert(item.pinyin, hanzi)
                item.release()
                processed += 1
        return processed

    def reset_error(self) -> None:
        """Forget earlier failures and allow requests again."""
        with self._lock:
            self.error_count = 0
            self._retry_at = None

    def close(self) -> None:
        """Stop the fetcher."""
        self.fetcher.close()