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
Decorators that log calls into mgpu_adjoint at DEBUG level.

The record names the function with its bound arguments, defaults included,
and the file and line of the caller.
"""
import inspect
import logging
from functools import wraps

# skip the wrapper frame so records point at the caller
_STACKLEVEL = 2


def _describe(func, args, kwargs):
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    return str(bound).replace("BoundArguments ", func.__name__)


def _caller():
    frame = inspect.getouterframes(inspect.currentframe(), 2)[2]
    return f"{frame.filename}::L{frame.lineno}"


def debug_logger(func):
    """Log every call of func before it runs.

    **Example**

    >>> @debug_logger
    ... def add(a, b=2):
    ...     return a + b
    >>> add(1)  # logs "Calling <add(a=1, b=2)> from <stdin>::L1"
    3
    """
    lgr = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        if lgr.isEnabledFor(logging.DEBUG):
            lgr.debug(
                "Calling %s from %s",
                _describe(func, args, kwargs),
                _caller(),
                stacklevel=_STACKLEVEL,
            )
        return func(*args, **kwargs)

    return wrapper


def debug_logger_init(func):
    """Log a constructor call once the instance is initialised.

    Intended for __init__ methods, so that the record can show the fully
    built self.
    """
    lgr = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        func(*args, **kwargs)
        if lgr.isEnabledFor(logging.DEBUG):
            lgr.debug(
                "Calling %s from %s",
                _describe(func, args, kwargs),
                _caller(),
                stacklevel=_STACKLEVEL,
            )

    return wrapper
