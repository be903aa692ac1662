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
This module contains the :class:`GateCache`, a bounded store of gate matrices
kept resident on one device so that repeated gates are not rebuilt and
re-uploaded.
"""
import threading

import autoray as ar
import numpy as np
from cachetools import LRUCache

from mgpu_adjoint.configuration import default_config
from mgpu_adjoint.ops import gates

from .dev_tag import DevTag

#: gates inserted by :meth:`GateCache.default_populate`
DEFAULT_GATES = (
    "Identity",
    "PauliX",
    "PauliY",
    "PauliZ",
    "Hadamard",
    "S",
    "T",
    "SWAP",
    "CNOT",
    "Toffoli",
    "CZ",
    "CSWAP",
)


class GateCache:
    """Cache of gate matrices for a single device, indexed by gate name and parameter.

    Each entry holds the host matrix together with its device-resident copy. The
    least recently used entries are evicted once ``maxsize`` entries are stored.
    All methods are safe to call from several threads.

    Args:
        populate (bool): whether to insert the fixed gates listed in ``DEFAULT_GATES``
        dev_tag (DevTag): device the matrices are uploaded to
        maxsize (int): maximum number of cached gates. Defaults to the
            ``gate_cache.maxsize`` configuration key, or 256.
        like (str): array library holding the device copies, e.g. ``"numpy"``
        c_dtype (type): complex data type of the device copies
    """

    def __init__(
        self, populate=False, dev_tag=None, maxsize=None, like="numpy", c_dtype=np.complex128
    ):
        if maxsize is None:
            maxsize = int(default_config.get("gate_cache.maxsize", 256))

        self._dev_tag = dev_tag or DevTag()
        self._like = like
        self._c_dtype = c_dtype
        self._gates = LRUCache(maxsize=maxsize)
        self._lock = threading.RLock()
        self._total_alloc_bytes = 0

        if populate:
            self.default_populate()

    def __len__(self):
        with self._lock:
            return len(self._gates)

    def __contains__(self, gate_id):
        return self.gate_exists(*gate_id)

    @property
    def dev_tag(self):
        """DevTag: device the cached matrices live on"""
        return self._dev_tag

    @property
    def total_alloc_bytes(self):
        """int: bytes uploaded to the device over the lifetime of the cache"""
        return self._total_alloc_bytes

    def default_populate(self):
        """Insert the parameter-free gates of ``DEFAULT_GATES``, keyed with parameter ``0.0``."""
        for name in DEFAULT_GATES:
            self.add_gate(name, 0.0, gates.FIXED_GATES[name])

    def gate_exists(self, gate_name, gate_param=0.0):
        """Check for the existence of a given gate.

        Args:
            gate_name (str): name of the gate
            gate_param (float): gate parameter, ``0.0`` for non-parametric gates

        Returns:
            bool: whether the gate is cached
        """
        with self._lock:
            return (gate_name, gate_param) in self._gates

    def add_gate(self, gate_name, gate_param, host_data):
        """Add a gate matrix to the cache and upload it to the device.

        Args:
            gate_name (str): name of the gate
            gate_param (float): gate parameter, ``0.0`` for non-parametric gates
            host_data (array[complex]): gate matrix, row-major

        Returns:
            array[complex]: the device-resident matrix
        """
        host = np.asarray(host_data, dtype=np.complex128)
        device = ar.do("asarray", host, dtype=self._c_dtype, like=self._like)

        with self._lock:
            self._gates[(gate_name, gate_param)] = (host, device)
            self._total_alloc_bytes += host.size * np.dtype(self._c_dtype).itemsize

        return device

    def get_gate_device(self, gate_name, gate_param=0.0):
        """Return the device-resident matrix of a cached gate.

        Raises:
            KeyError: if the gate is not cached
        """
        with self._lock:
            return self._gates[(gate_name, gate_param)][1]

    def get_gate_host(self, gate_name, gate_param=0.0):
        """Return the host matrix of a cached gate.

        Raises:
            KeyError: if the gate is not cached
        """
        with self._lock:
            return self._gates[(gate_name, gate_param)][0]

    def get_or_add(self, gate_name, gate_param, builder):
        """Return the device matrix of a gate, building and inserting it on a miss.

        Args:
            gate_name (str): name of the gate
            gate_param (float): gate parameter, ``0.0`` for non-parametric gates
            builder (Callable[[], array[complex]]): returns the host matrix

        Returns:
            array[complex]: the device-resident matrix
        """
        with self._lock:
            entry = self._gates.get((gate_name, gate_param))
            if entry is not None:
                return entry[1]
            return self.add_gate(gate_name, gate_param, builder())
