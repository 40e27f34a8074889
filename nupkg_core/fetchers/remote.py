from __future__ import annotations

import io
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import ExitStack
from typing import BinaryIO, Callable

import requests
from requests.exceptions import RequestException

from ..cancellation import CancellationToken, check_cancelled
from ..config import RemoteFileConfig
from ..errors import OperationCancelledError
from ..security import redact_uri_for_log

logger = logging.getLogger(__name__)


class ResponseTooLargeError(RequestException):
    """Raised when a response body exceeds the configured limit."""


class RemoteFileFetcher:
    """Downloads a remote file into a read-only in-memory stream.

    Without an injected ``session`` every call opens its own
    :class:`requests.Session` and closes it before returning. A shared session
    is used as-is and never closed here; its owner releases it.

    With a cancellation token the request is sent from a worker thread so that
    cancelling returns immediately, even while connecting or waiting for
    headers. A response that arrives after cancellation is closed unread.
    """

    def __init__(
        self,
        config: RemoteFileConfig | None = None,
        *,
        session: requests.Session | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.config = config or RemoteFileConfig()
        self._session = session
        self._session_factory = session_factory
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def close(self) -> None:
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def fetch_remote(
        self,
        uri: str,
        cancellation_token: CancellationToken | None = None,
    ) -> BinaryIO | None:
        display = redact_uri_for_log(str(uri))
        try:
            check_cancelled(cancellation_token)
            data = self._download(str(uri), cancellation_token)
        except OperationCancelledError:
            logger.debug("download cancelled: %s", display)
            return None
        except (RequestException, ValueError, OSError) as exc:
            if cancellation_token is not None and cancellation_token.is_cancelled():
                logger.debug("download cancelled: %s", display)
            else:
                logger.warning("download failed for %s: %s", display, exc)
            return None
        except Exception:
            if cancellation_token is not None and cancellation_token.is_cancelled():
                logger.debug("download aborted after cancellation: %s", display, exc_info=True)
                return None
            raise
        return io.BufferedReader(io.BytesIO(data))

    def _download(self, uri: str, cancellation_token: CancellationToken | None) -> bytes:
        with ExitStack() as stack:
            session = self._session
            if session is None:
                session = stack.enter_context(self._session_factory())
            response = self._send(session, uri, cancellation_token)
            stack.callback(response.close)
            if cancellation_token is not None:
                stack.callback(cancellation_token.register(response.close))
            check_cancelled(cancellation_token)

            status = response.status_code
            if not 200 <= status < 300:
                raise requests.HTTPError(f"unexpected status {status}", response=response)

            limit = self.config.max_response_bytes
            buffer = bytearray()
            for chunk in response.iter_content(chunk_size=self.config.chunk_size):
                check_cancelled(cancellation_token)
                if not chunk:
                    continue
                buffer.extend(chunk)
                if limit is not None and len(buffer) > limit:
                    raise ResponseTooLargeError(f"response exceeds configured limit {limit} bytes")
            check_cancelled(cancellation_token)
            return bytes(buffer)

    def _get(self, session: requests.Session, uri: str) -> requests.Response:
        return session.get(
            uri,
            stream=True,
            timeout=self.config.timeout_seconds,
            headers={"user-agent": self.config.user_agent},
        )

    def _send(
        self,
        session: requests.Session,
        uri: str,
        cancellation_token: CancellationToken | None,
    ) -> requests.Response:
        if cancellation_token is None:
            return self._get(session, uri)
        future = self._submit(self._get, session, uri)
        settled = threading.Event()
        future.add_done_callback(lambda _: settled.set())
        unregister = cancellation_token.register(settled.set)
        try:
            settled.wait()
        finally:
            unregister()
        if cancellation_token.is_cancelled() and not future.done():
            future.add_done_callback(_close_late_response)
            raise OperationCancelledError("download cancelled while waiting for response")
        return future.result()

    def _submit(self, fn, *args) -> Future:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(thread_name_prefix="nupkg-remote")
            return self._executor.submit(fn, *args)


def _close_late_response(future: Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()
