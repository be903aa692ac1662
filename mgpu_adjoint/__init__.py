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
This is the top level module from which all basic functions and classes of
mgpu_adjoint can be directly imported.
"""
from mgpu_adjoint._version import __version__
from mgpu_adjoint.about import about
from mgpu_adjoint.configuration import Configuration, default_config
from mgpu_adjoint.exceptions import (
    ConfigurationError,
    DeviceConsistencyError,
    InvalidArgumentError,
    ResourceExhaustionError,
    UnsupportedOperationError,
    WireError,
)
import mgpu_adjoint.logging
from mgpu_adjoint.tape import STATE_PREP_OPS, Operation, OpsData, create_ops_data
from mgpu_adjoint.observables import (
    Hamiltonian,
    HermitianObs,
    NamedObs,
    TensorProdObs,
    apply_in_place,
    expval,
    get_obs_name,
    get_wires,
    hamiltonian,
    hermitian_obs,
    named_obs,
    tensor_prod_obs,
)
from mgpu_adjoint.ops import GENERATORS, GeneratorDescriptor, apply_generator, get_generator
from mgpu_adjoint.devices import DevicePool, DevTag, GateCache, StateVector, get_device_pool
from mgpu_adjoint.concurrency import parallel_for
from mgpu_adjoint.algorithms import (
    AdjointJacobian,
    adjoint_jacobian,
    batch_adjoint_jacobian,
    partition_observables,
)
