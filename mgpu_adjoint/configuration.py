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
r"""
This module contains the :class:`Configuration` class, which holds the runtime
options of mgpu_adjoint read from a TOML file.

The file is looked up in the current directory, then in the directory named
by the ``MGPU_ADJOINT_CONF`` environment variable, then in the user
configuration directory. A path to the file may also be given directly.

Recognised options:

.. code-block:: toml

    [devices]
    num_devices = 4     # size of the process-wide device pool

    [adjoint]
    max_workers = 8     # threads for the per-observable work of one computation

    [gate_cache]
    maxsize = 256       # gate matrices kept per device
"""
import os

import tomlkit
from appdirs import user_config_dir

#: environment variable naming an extra directory to search for the configuration file
CONF_ENV = "MGPU_ADJOINT_CONF"


class Configuration:
    """Runtime options loaded from a TOML file.

    Options are read and written with dotted keys. Reading a key that is not
    set gives an empty dictionary, so that nested lookups never raise.

    Args:
        name (str): file name of the configuration, or an absolute or relative
            path to it

    **Example**

    >>> config = Configuration("config.toml")
    >>> config["devices.num_devices"] = 2
    >>> config["devices"]
    {'num_devices': 2}
    >>> config["gate_cache.maxsize"]
    {}
    >>> config.get("gate_cache.maxsize", 256)
    256
    """

    def __init__(self, name):
        self._config = {}
        self._filepath = None
        self._name = name
        self._user_config_dir = user_config_dir("mgpu_adjoint", "Xanadu")
        self._env_config_dir = os.environ.get(CONF_ENV, "")

        for directory in (os.curdir, self._env_config_dir, self._user_config_dir, ""):
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate):
                self.load(candidate)
                self._filepath = candidate
                break

    def __str__(self):
        return str(self._config) if self._config else ""

    def __repr__(self):
        return f"mgpu_adjoint Configuration <{self._filepath}>"

    def __bool__(self):
        return bool(self._config)

    def __getitem__(self, key):
        node = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return {}
            node = node[part]
        return node

    def __setitem__(self, key, value):
        *parents, leaf = key.split(".")
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    @property
    def path(self):
        """str: path of the loaded file, or ``None`` if no file was found"""
        return self._filepath

    def get(self, key, default=None):
        """Value of a dotted key, or ``default`` if the key is not set."""
        value = self[key]
        return default if value == {} else value

    def load(self, filepath):
        """Replace the options with the content of a TOML file.

        Args:
            filepath (str): path to the file
        """
        with open(filepath, "r", encoding="utf8") as f:
            self._config = tomlkit.parse(f.read()).unwrap()

    def save(self, filepath):
        """Write the options to a TOML file.

        Args:
            filepath (str): path to the file
        """
        with open(filepath, "w", encoding="utf8") as f:
            f.write(tomlkit.dumps(self._config))


default_config = Configuration("config.toml")
"""Configuration: options loaded at import time from ``config.toml``"""
