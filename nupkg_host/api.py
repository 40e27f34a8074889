from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import BinaryIO, Iterator

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from nupkg_core.cancellation import CancellationToken
from nupkg_core.errors import InvalidArgumentError, ServiceClosedError
from nupkg_core.models import RemoteFileResult
from nupkg_core.service import RemoteFileService

log = logging.getLogger(__name__)

STATUS_HEADER = "X-Remote-File-Status"
_CHUNK_SIZE = 64 * 1024


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
            yield chunk
    finally:
        stream.close()


def _close_late_result(task: asyncio.Future) -> None:
    if task.cancelled() or task.exception() is not None:
        return
    result = task.result()
    if result.stream is not None:
        result.stream.close()


async def fetch_in_threadpool(
    service: RemoteFileService,
    uri: str,
    token: CancellationToken,
) -> RemoteFileResult:
    """Run ``service.fetch`` off the event loop.

    If the awaiting request is cancelled (client disconnect) the token is
    cancelled too, and a stream the worker still produces is closed.
    """
    task = asyncio.ensure_future(run_in_threadpool(service.fetch, uri, token))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        token.cancel()
        task.add_done_callback(_close_late_result)
        raise


def make_app(service: RemoteFileService) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        try:
            yield
        finally:
            service.close()

    app = FastAPI(title="nupkg remote files", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    def health():
        return {"ok": not service.closed}

    @app.get("/v1/remote-file")
    async def get_remote_file(uri: str = Query(..., min_length=1)):
        try:
            result = await fetch_in_threadpool(service, uri, CancellationToken())
        except InvalidArgumentError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ServiceClosedError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        if not result.found:
            log.debug("no content for %s", uri)
            raise HTTPException(status_code=404, detail="not found")
        return StreamingResponse(
            _iter_stream(result.stream),
            media_type="application/octet-stream",
            headers={STATUS_HEADER: result.status.value},
        )

    return app
