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
Opt-in logging setup for mgpu_adjoint.

Nothing is emitted by default: every module logger carries a NullHandler.
:func:`enable_logging` loads the bundled log_config.toml (or a file of the
user's choosing) into :func:`logging.config.dictConfig` and registers the
:data:`TRACE` level.
"""
import logging
import logging.config
import os
from importlib import import_module
from importlib.util import find_spec

#: TOML parsers tried in order; tomllib ships with Python 3.11 and above
TOML_PARSERS = ("tomllib", "tomli", "tomlkit")

#: log level below DEBUG, used for per-column records of the adjoint sweep
TRACE = logging.DEBUG // 2

_CONFIG_DIR = os.path.dirname(__file__)
_CONFIG_FILE = "log_config.toml"


def _toml_parser():
    for name in TOML_PARSERS:
        if find_spec(name):
            return import_module(name)

    raise ImportError(
        "Enabling mgpu_adjoint logging requires one of the TOML parsers "
        f"{', '.join(TOML_PARSERS)}. Install tomli or tomlkit with pip, "
        "or use Python 3.11 or newer."
    )


def _read_config(path):
    parser = _toml_parser()
    with open(path, "rb") as f:
        if parser.__name__ == "tomlkit":
            return parser.parse(f.read().decode("utf8")).unwrap()
        return parser.load(f)


def _install_trace_level():
    def trace(self, message, *args, **kwargs):
        # pylint: disable=protected-access
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)

    logging.addLevelName(TRACE, "TRACE")
    logging.TRACE = TRACE
    logging.getLoggerClass().trace = trace


def config_path():
    """Absolute path of the bundled log_config.toml.

    Returns:
        str: path to the default logging configuration

    **Example**

    >>> config_path()
    '/home/user/.venv/lib/python3.11/site-packages/mgpu_adjoint/logging/log_config.toml'
    """
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


def enable_logging(path=None):
    """Turn on mgpu_adjoint logging.

    Any logging configuration installed earlier for the mgpu_adjoint loggers
    is replaced.

    Args:
        path (str): TOML file holding a :func:`logging.config.dictConfig`
            dictionary. Defaults to :func:`config_path`.

    **Example**

    >>> mgpu_adjoint.logging.enable_logging()
    >>> logging.getLogger("mgpu_adjoint").level == logging.DEBUG
    True
    """
    _install_trace_level()
    logging.config.dictConfig(_read_config(path or config_path()))
