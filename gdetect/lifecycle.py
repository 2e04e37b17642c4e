from __future__ import annotations

import asyncio
import os
from enum import Enum
from typing import TYPE_CHECKING, Union

from . import errors
from .logging_config import logger
from .models import Result, WaitForOptions

if TYPE_CHECKING:  # pragma: no cover
    from .client import Client


class SubmissionState(str, Enum):
    submitting = "SUBMITTING"
    polling = "POLLING"
    done = "DONE"
    failed = "FAILED"
    timed_out = "TIMED_OUT"


# The backend may be degraded while the analysis keeps running; only the done
# flag ends a wait.
TRANSIENT_ERRORS = (errors.TransportError, errors.ServerError, errors.TimeoutError)


async def _submit_and_poll(client: "Client", path: Union[str, os.PathLike], options: WaitForOptions, log) -> Result:
    state = SubmissionState.submitting
    try:
        uuid = await client.submit_file(path, options)
        state = SubmissionState.polling
        log = log.bind(uuid=uuid)
        polls = 0
        loop = asyncio.get_running_loop()
        next_poll = loop.time() + options.pull_time
        while True:
            # Ticks are fixed; a slow round trip eats into the next interval.
            await asyncio.sleep(max(0.0, next_poll - loop.time()))
            next_poll = max(next_poll + options.pull_time, loop.time())
            polls += 1
            try:
                result = await client.get_result_by_uuid(uuid)
            except TRANSIENT_ERRORS as exc:
                log.info("wait.transient_error", poll=polls, error=str(exc))
                continue
            log.debug("wait.poll", poll=polls, done=result.done)
            if result.done:
                log.info("wait.done", state=SubmissionState.done.value, polls=polls)
                return result
    except errors.GDetectError as exc:
        log.info("wait.failed", state=SubmissionState.failed.value, stage=state.value, error=str(exc))
        raise


async def wait_for_file(client: "Client", path: Union[str, os.PathLike], options: WaitForOptions) -> Result:
    """Submit ``path`` then poll its result every ``options.pull_time`` seconds.

    ``options.timeout`` bounds the whole run, submission included. Task
    cancellation aborts the request in flight and propagates untouched.
    """
    log = logger.bind(path=str(path))
    try:
        return await asyncio.wait_for(_submit_and_poll(client, path, options, log), options.timeout)
    except errors.TimeoutError:
        raise
    except asyncio.TimeoutError as exc:
        log.info("wait.timed_out", state=SubmissionState.timed_out.value, timeout=options.timeout)
        raise errors.TimeoutError(f"analysis of {path} not done after {options.timeout}s") from exc
