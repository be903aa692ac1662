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
This module contains all the custom exceptions used in mgpu_adjoint.

.. currentmodule:: mgpu_adjoint.exceptions

Construction and Argument Errors
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

.. autosummary::
    :toctree: api

    ~ConfigurationError
    ~InvalidArgumentError
    ~WireError

Execution Errors
~~~~~~~~~~~~~~~~

.. autosummary::
    :toctree: api

    ~UnsupportedOperationError
    ~DeviceConsistencyError
    ~ResourceExhaustionError

"""  # pragma: no cover

# =============================================================================
# Construction and argument errors
# =============================================================================


class ConfigurationError(ValueError):
    """Raised when an observable is built from inconsistent parts, such as
    overlapping tensor-product wires or mismatched Hamiltonian coefficients."""


class InvalidArgumentError(ValueError):
    """Raised when a Jacobian computation receives arguments it cannot work with,
    for example an empty list of trainable parameters."""


class WireError(Exception):
    """Exception raised when wires do not fit the state vector they are applied to."""


# =============================================================================
# Execution errors
# =============================================================================


class UnsupportedOperationError(Exception):
    """Raised when an operation cannot be applied or differentiated, such as
    multi-parameter gates under the adjoint method or gates without a registered
    generator."""


class DeviceConsistencyError(RuntimeError):
    """Raised when two state vectors taking part in the same kernel live on
    different devices."""


class ResourceExhaustionError(RuntimeError):
    """Raised when no device could be acquired from the device pool in the time allowed."""
