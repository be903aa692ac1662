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
Registry of the generators of the differentiable single-parameter gates.

A gate :math:`U(\theta)` is registered together with a Hermitian generator
:math:`G` and a scaling factor :math:`s` such that

.. math::

    U(\theta) = e^{i s \theta G}.

The generator action is applied in place to a state vector, and the scaling
enters the Jacobian entry :math:`-2 s\, \mathrm{Im}\langle H\lambda | G \mu\rangle`.

**Example**

>>> desc = get_generator("RX")
>>> desc.scaling
-0.5
>>> sv = StateVector(1)
>>> apply_generator(sv, "RX", [0], inverse=True)
0.5
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable

import numpy as np

from mgpu_adjoint.exceptions import UnsupportedOperationError


@dataclass(frozen=True)
class GeneratorDescriptor:
    """Generator action and scaling factor of a single-parameter gate.

    Args:
        action (Callable): applies the generator in place, called as
            ``action(sv, wires)``
        scaling (float): factor :math:`s` in :math:`U(\\theta) = e^{i s \\theta G}`
    """

    action: Callable
    scaling: float


def _excitation_generator(dim, i, j, diagonal=0.0):
    mat = diagonal * np.eye(dim, dtype=np.complex128)
    mat[i, i] = 0
    mat[j, j] = 0
    mat[i, j] = -1j
    mat[j, i] = 1j
    return mat


SINGLE_EXCITATION_GEN = _excitation_generator(4, 1, 2)
SINGLE_EXCITATION_MINUS_GEN = _excitation_generator(4, 1, 2, 1.0)
SINGLE_EXCITATION_PLUS_GEN = _excitation_generator(4, 1, 2, -1.0)
DOUBLE_EXCITATION_GEN = _excitation_generator(16, 3, 12)
DOUBLE_EXCITATION_MINUS_GEN = _excitation_generator(16, 3, 12, 1.0)
DOUBLE_EXCITATION_PLUS_GEN = _excitation_generator(16, 3, 12, -1.0)


def _pauli_on_each(pauli):
    def action(sv, wires):
        for w in wires:
            sv.apply_operation(pauli, [w])

    return action


def _controlled_pauli(pauli):
    # |1><1| on the control followed by the Pauli on the target
    def action(sv, wires):
        sv.apply_projector(wires[:1], [1])
        sv.apply_operation(pauli, wires[1:])

    return action


def _projector_on_ones(sv, wires):
    sv.apply_projector(wires, [1] * len(wires))


def _dense(matrix):
    def action(sv, wires):
        sv.apply_matrix(matrix, wires)

    return action


GENERATORS = MappingProxyType(
    {
        "RX": GeneratorDescriptor(_pauli_on_each("PauliX"), -0.5),
        "RY": GeneratorDescriptor(_pauli_on_each("PauliY"), -0.5),
        "RZ": GeneratorDescriptor(_pauli_on_each("PauliZ"), -0.5),
        "IsingXX": GeneratorDescriptor(_pauli_on_each("PauliX"), -0.5),
        "IsingYY": GeneratorDescriptor(_pauli_on_each("PauliY"), -0.5),
        "IsingZZ": GeneratorDescriptor(_pauli_on_each("PauliZ"), -0.5),
        "PhaseShift": GeneratorDescriptor(_projector_on_ones, 1.0),
        "CRX": GeneratorDescriptor(_controlled_pauli("PauliX"), -0.5),
        "CRY": GeneratorDescriptor(_controlled_pauli("PauliY"), -0.5),
        "CRZ": GeneratorDescriptor(_controlled_pauli("PauliZ"), -0.5),
        "ControlledPhaseShift": GeneratorDescriptor(_projector_on_ones, 1.0),
        "SingleExcitation": GeneratorDescriptor(_dense(SINGLE_EXCITATION_GEN), -0.5),
        "SingleExcitationMinus": GeneratorDescriptor(_dense(SINGLE_EXCITATION_MINUS_GEN), -0.5),
        "SingleExcitationPlus": GeneratorDescriptor(_dense(SINGLE_EXCITATION_PLUS_GEN), -0.5),
        "DoubleExcitation": GeneratorDescriptor(_dense(DOUBLE_EXCITATION_GEN), -0.5),
        "DoubleExcitationMinus": GeneratorDescriptor(_dense(DOUBLE_EXCITATION_MINUS_GEN), -0.5),
        "DoubleExcitationPlus": GeneratorDescriptor(_dense(DOUBLE_EXCITATION_PLUS_GEN), -0.5),
        "MultiRZ": GeneratorDescriptor(_pauli_on_each("PauliZ"), -0.5),
    }
)
"""Mapping[str, GeneratorDescriptor]: read-only registry of gate generators"""


def get_generator(name):
    """Look up the generator of a gate.

    Args:
        name (str): name of the gate

    Returns:
        GeneratorDescriptor: the generator action and scaling

    Raises:
        UnsupportedOperationError: if the gate has no registered generator
    """
    try:
        return GENERATORS[name]
    except KeyError as e:
        raise UnsupportedOperationError(
            f"The {name} operation is not supported using the adjoint differentiation method"
        ) from e


def apply_generator(sv, name, wires, inverse=False):
    """Apply the generator of a gate to a state vector in place.

    Args:
        sv (StateVector): state the generator acts on
        name (str): name of the gate
        wires (Sequence[int]): wires of the gate
        inverse (bool): whether the gate appears inverted in the circuit

    Returns:
        float: the scaling factor, negated for inverted gates
    """
    desc = get_generator(name)
    desc.action(sv, list(wires))
    return -desc.scaling if inverse else desc.scaling
