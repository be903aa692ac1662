# Copyright 2018-2026 Xanadu Quantum Technologies Inc.

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
This module contains :func:`parallel_for`, the structured fan-out used for
per-observable work and for per-device shards.
"""
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def parallel_for(fn, items, max_workers=None, stop_event=None):
    """Apply ``fn`` to every item on a thread pool and collect the results in order.

    If any call raises, ``stop_event`` is set so that running calls can return
    early, the calls that have not started yet are cancelled, the running ones
    are waited for, and the error of the failed call with the lowest position in
    ``items`` is re-raised. No task outlives this function.

    Args:
        fn (Callable): function of a single item
        items (Iterable): the inputs
        max_workers (int): number of worker threads. ``None`` uses the
            ``ThreadPoolExecutor`` default; ``1`` runs serially on the calling thread.
        stop_event (threading.Event): set on the first failure. Long-running
            calls of ``fn`` may poll it to stop working once a sibling has failed.

    Returns:
        list: ``[fn(item) for item in items]``

    **Example**

    >>> parallel_for(lambda x: x**2, range(5), max_workers=2)
    [0, 1, 4, 9, 16]
    """
    items = list(items)

    if max_workers == 1 or len(items) <= 1:
        try:
            return [fn(item) for item in items]
        except Exception:
            if stop_event is not None:
                stop_event.set()
            raise

    with ThreadPoolExecutor(max_workers) as pool:
        futures = [pool.submit(fn, item) for item in items]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

        if any(f.exception() is not None for f in done):
            if stop_event is not None:
                stop_event.set()
            for f in not_done:
                f.cancel()
            wait(futures)

    errors = [f.exception() for f in futures if not f.cancelled() and f.exception() is not None]
    if errors:
        logger.debug("%d of %d tasks failed; re-raising the first", len(errors), len(items))
        raise errors[0]

    return [f.result() for f in futures]
