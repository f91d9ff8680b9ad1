"""Background HTTP fetching with a fixed pool of reusable requests."""

from __future__ import annotations

import threading
import urllib.error
import urllib.request
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Deque, List, Optional

MAX_HANDLES = 100
MAX_BUFFER_SIZE = 2048
REQUEST_TIMEOUT = 10
_CHUNK_SIZE = 512

ResultCallback = Callable[[str, str], None]


class Request:
    """One slot of the request pool: what to fetch and what came back."""

    def __init__(self) -> None:
        self.url = ""
        self.proxy = ""
        self.pinyin = ""
        self.callback: Optional[ResultCallback] = None
        self.busy = False
        self.http_code = 0
        self.error: Optional[BaseException] = None
        self._data = bytearray()

    @property
    def result(self) -> bytes:
        """The response body received so far."""
        return bytes(self._data)

    def write(self, chunk: bytes) -> int:
        """Append response data; return how much was taken.

        Returns 0, taking nothing, when the body would grow beyond
        ``MAX_BUFFER_SIZE`` bytes.
        """
        if len(self._data) + len(chunk) > MAX_BUFFER_SIZE:
            return 0
        self._data.extend(chunk)
        return len(chunk)

    def release(self) -> None:
        """Return the slot to the pool, dropping everything it held."""
        self.busy = False
        self._data.clear()
        self.url = ""
        self.proxy = ""
        self.pinyin = ""
        self.callback = None
        self.http_code = 0
        self.error = None


Opener = Callable[[Request], int]


def _urllib_opener(request: Request) -> int:
    """Fetch ``request.url`` and feed the body to ``request.write``."""
    if request.proxy:
        handler = urllib.request.ProxyHandler(
            {"http": request.proxy, "https": request.proxy}
        )
        opener = urllib.request.build_opener(handler)
    else:
        opener = urllib.request.build_opener()

    def drain(response: Any) -> None:
        while True:
            chunk = response.read(_CHUNK_SIZE)
            if not chunk:
                return
            if request.write(chunk) != len(chunk):
                raise OSError("response body too large")

    try:
        with opener.open(request.url, timeout=REQUEST_TIMEOUT) as response:
            code = response.status
            drain(response)
            return code
    except urllib.error.HTTPError as exc:
        with exc:
            drain(exc)
        return exc.code


class FetchThread:
    """Runs requests in the background and queues them when finished.

    ``on_finished`` is called from a worker thread after each request has
    been queued; the owner then drains the queue with :meth:`pop_finished`.
    """

    def __init__(
        self,
        on_finished: Optional[Callable[[], None]] = None,
        max_handles: int = MAX_HANDLES,
        opener: Optional[Opener] = None,
    ) -> None:
        self._on_finished = on_finished
        self._opener = opener if opener is not None else _urllib_opener
        self._handles: List[Request] = [Request() for _ in range(max_handles)]
        self._finished: Deque[Request] = deque()
        self._finished_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, min(max_handles, 8)),
            thread_name_prefix="fetch",
        )
        self._closed = False

    def add_request(self, setup: Callable[[Request], None]) -> bool:
        """Take a free request, let ``setup`` fill it and start it.

        Returns False when every request of the pool is busy or the
        fetcher is closed.
        """
        if self._closed:
            return False
        request = next((h for h in self._handles if not h.busy), None)
        if request is None:
            return False
        setup(request)
        request.busy = True
        self._executor.submit(self._perform, request)
        return True

    def _perform(self, request: Request) -> None:
        try:
            request.http_code = self._opener(request)
        except Exception as exc:  # the request fails, the fetcher goes on
            request.error = exc
            request.http_code = request.http_code or 0
        with self._finished_lock:
            self._finished.append(request)
        if self._on_finished is not None:
            self._on_finished()

    def pop_finished(self) -> Optional[Request]:
        """The oldest finished request, or ``None``."""
        with self._finished_lock:
            return self._finished.popleft() if self._finished else None

    def close(self) -> None:
        """Stop working and release every request still held."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=True)
        with self._finished_lock:
            while self._finished:
                self._finished.popleft().release()
        for handle in self._handles:
            handle.release()

    def __enter__(self) -> "FetchThread":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()