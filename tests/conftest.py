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
Pytest configuration file for mgpu_adjoint test suite.
"""
import os
import sys

import numpy as np
import pytest

import mgpu_adjoint as ma

sys.path.append(os.path.join(os.path.dirname(__file__), "helpers"))

# defaults
TOL = 1e-6


@pytest.fixture(scope="session")
def tol():
    """Numerical tolerance for equality tests."""
    return float(os.environ.get("TOL", TOL))


@pytest.fixture(autouse=True)
def restore_global_seed():
    original_state = np.random.get_state()
    yield
    np.random.set_state(original_state)


@pytest.fixture(scope="function")
def init_state():
    """Fixture to create a random normalized state vector on the given number of qubits"""

    def _init_state(n, seed=None):
        rng = np.random.default_rng(seed)
        state = rng.random(2**n) + 1j * rng.random(2**n)
        return state / np.linalg.norm(state)

    return _init_state


@pytest.fixture(scope="function")
def zero_state():
    """Fixture returning the computational basis state |0...0> as a flat array"""

    def _zero_state(n):
        state = np.zeros(2**n, dtype=np.complex128)
        state[0] = 1
        return state

    return _zero_state


@pytest.fixture(scope="function", params=[1, 2, 3])
def device_pool(request):
    """Device pool of a few sizes"""
    return ma.DevicePool(request.param)


@pytest.fixture(scope="function")
def isolated_default_pool(monkeypatch):
    """Replace the process-wide device pool for the duration of a test"""
    import mgpu_adjoint.devices.device_pool as dp  # pylint: disable=import-outside-toplevel

    monkeypatch.setattr(dp, "_default_pool", None)
    yield dp
