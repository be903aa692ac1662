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
Host-side matrix definitions for the gates understood by the state-vector backend.

All matrices use the big-endian convention: the first wire of a gate is the
most significant bit of the row and column index. Controlled gates list their
control wires first.
"""
import functools

import numpy as np

from mgpu_adjoint.exceptions import UnsupportedOperationError

SQRT2INV = 1 / np.sqrt(2)
TPHASE = np.exp(1j * np.pi / 4)

I = np.eye(2, dtype=np.complex128)
X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
H = SQRT2INV * np.array([[1, 1], [1, -1]], dtype=np.complex128)
S = np.diag([1, 1j]).astype(np.complex128)
T = np.diag([1, TPHASE]).astype(np.complex128)
SX = 0.5 * np.array([[1 + 1j, 1 - 1j], [1 - 1j, 1 + 1j]], dtype=np.complex128)
SWAP = np.array(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]], dtype=np.complex128
)

#: projector onto the :math:`|1\rangle` state of a single qubit
P_11 = np.diag([0, 1]).astype(np.complex128)


def controlled(target_matrix, num_controls=1):
    r"""Embed a target matrix into the block-diagonal matrix controlled on
    all control qubits being in the :math:`|1\rangle` state.

    Args:
        target_matrix (array[complex]): square matrix acting on the target wires
        num_controls (int): number of leading control wires

    Returns:
        array[complex]: the controlled matrix
    """
    dim = target_matrix.shape[0] * 2**num_controls
    mat = np.eye(dim, dtype=np.complex128)
    mat[-target_matrix.shape[0] :, -target_matrix.shape[0] :] = target_matrix
    return mat


CNOT = controlled(X)
CY = controlled(Y)
CZ = controlled(Z)
Toffoli = controlled(X, 2)
CSWAP = controlled(SWAP)


def rx(theta):
    r"""Single-qubit rotation about the X axis, :math:`e^{-i\theta X/2}`."""
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=np.complex128)


def ry(theta):
    r"""Single-qubit rotation about the Y axis, :math:`e^{-i\theta Y/2}`."""
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=np.complex128)


def rz(theta):
    r"""Single-qubit rotation about the Z axis, :math:`e^{-i\theta Z/2}`."""
    p = np.exp(-0.5j * theta)
    return np.array([[p, 0], [0, np.conj(p)]], dtype=np.complex128)


def rot(phi, theta, omega):
    r"""Arbitrary single-qubit rotation :math:`R_Z(\omega)R_Y(\theta)R_Z(\phi)`."""
    return rz(omega) @ ry(theta) @ rz(phi)


def phase_shift(phi):
    r"""Phase shift :math:`\mathrm{diag}(1, e^{i\phi})`."""
    return np.array([[1, 0], [0, np.exp(1j * phi)]], dtype=np.complex128)


def crx(theta):
    return controlled(rx(theta))


def cry(theta):
    return controlled(ry(theta))


def crz(theta):
    return controlled(rz(theta))


def crot(phi, theta, omega):
    return controlled(rot(phi, theta, omega))


def controlled_phase_shift(phi):
    return controlled(phase_shift(phi))


def ising_xx(phi):
    r"""Ising XX coupling gate :math:`e^{-i\phi X\otimes X/2}`."""
    c, s = np.cos(phi / 2), np.sin(phi / 2)
    return c * np.eye(4, dtype=np.complex128) - 1j * s * np.kron(X, X)


def ising_yy(phi):
    r"""Ising YY coupling gate :math:`e^{-i\phi Y\otimes Y/2}`."""
    c, s = np.cos(phi / 2), np.sin(phi / 2)
    return c * np.eye(4, dtype=np.complex128) - 1j * s * np.kron(Y, Y)


def ising_zz(phi):
    r"""Ising ZZ coupling gate :math:`e^{-i\phi Z\otimes Z/2}`."""
    return np.diag(multi_rz_eigvals(phi, 2))


def _excitation(phi, dim, i, j, phase):
    """Rotation by ``phi`` in the two-dimensional subspace spanned by basis states
    ``i`` and ``j``, with all other basis states multiplied by ``phase``."""
    c, s = np.cos(phi / 2), np.sin(phi / 2)
    mat = phase * np.eye(dim, dtype=np.complex128)
    mat[i, i] = c
    mat[j, j] = c
    mat[i, j] = -s
    mat[j, i] = s
    return mat


def single_excitation(phi):
    r"""Givens rotation on the :math:`\{|01\rangle, |10\rangle\}` subspace."""
    return _excitation(phi, 4, 1, 2, 1.0)


def single_excitation_minus(phi):
    return _excitation(phi, 4, 1, 2, np.exp(-0.5j * phi))


def single_excitation_plus(phi):
    return _excitation(phi, 4, 1, 2, np.exp(0.5j * phi))


def double_excitation(phi):
    r"""Givens rotation on the :math:`\{|0011\rangle, |1100\rangle\}` subspace."""
    return _excitation(phi, 16, 3, 12, 1.0)


def double_excitation_minus(phi):
    return _excitation(phi, 16, 3, 12, np.exp(-0.5j * phi))


def double_excitation_plus(phi):
    return _excitation(phi, 16, 3, 12, np.exp(0.5j * phi))


@functools.lru_cache()
def _parity_signs(num_wires):
    r"""Eigenvalues of :math:`Z^{\otimes n}`, in computational-basis order."""
    signs = np.array([1.0])
    for _ in range(num_wires):
        signs = np.kron(signs, np.array([1.0, -1.0]))
    return signs


def multi_rz_eigvals(theta, num_wires):
    r"""Diagonal of :math:`e^{-i\theta Z^{\otimes n}/2}`."""
    return np.exp(-0.5j * theta * _parity_signs(num_wires))


def multi_rz(theta, num_wires):
    return np.diag(multi_rz_eigvals(theta, num_wires))


#: fixed gates, keyed by name
FIXED_GATES = {
    "Identity": I,
    "PauliX": X,
    "PauliY": Y,
    "PauliZ": Z,
    "Hadamard": H,
    "S": S,
    "T": T,
    "SX": SX,
    "CNOT": CNOT,
    "CY": CY,
    "CZ": CZ,
    "SWAP": SWAP,
    "CSWAP": CSWAP,
    "Toffoli": Toffoli,
}

#: parametric gates of fixed size, keyed by name
PARAMETRIC_GATES = {
    "RX": rx,
    "RY": ry,
    "RZ": rz,
    "Rot": rot,
    "PhaseShift": phase_shift,
    "CRX": crx,
    "CRY": cry,
    "CRZ": crz,
    "CRot": crot,
    "ControlledPhaseShift": controlled_phase_shift,
    "IsingXX": ising_xx,
    "IsingYY": ising_yy,
    "IsingZZ": ising_zz,
    "SingleExcitation": single_excitation,
    "SingleExcitationMinus": single_excitation_minus,
    "SingleExcitationPlus": single_excitation_plus,
    "DoubleExcitation": double_excitation,
    "DoubleExcitationMinus": double_excitation_minus,
    "DoubleExcitationPlus": double_excitation_plus,
}

#: gates whose matrices are diagonal in the computational basis
DIAGONAL_GATES = frozenset(
    ["PauliZ", "S", "T", "CZ", "RZ", "PhaseShift", "CRZ", "ControlledPhaseShift", "IsingZZ"]
)

#: number of numeric parameters taken by each parametric gate
NUM_PARAMS = {name: 3 if name in ("Rot", "CRot") else 1 for name in PARAMETRIC_GATES}
NUM_PARAMS["MultiRZ"] = 1


def gate_matrix(name, params=(), num_wires=None):
    """Return the host matrix of a named gate.

    Args:
        name (str): name of the gate
        params (Sequence[float]): gate parameters
        num_wires (int): number of wires, only needed for gates of variable size
            such as ``MultiRZ``

    Returns:
        array[complex]: the gate matrix

    Raises:
        UnsupportedOperationError: if the gate is unknown or receives the wrong
            number of parameters
    """
    if name in FIXED_GATES:
        return FIXED_GATES[name]

    if name == "MultiRZ":
        _check_num_params(name, params)
        return multi_rz(params[0], num_wires)

    try:
        fn = PARAMETRIC_GATES[name]
    except KeyError as e:
        raise UnsupportedOperationError(f"The gate {name} is not supported.") from e

    _check_num_params(name, params)
    return fn(*params)


def _check_num_params(name, params):
    if len(params) != NUM_PARAMS[name]:
        raise UnsupportedOperationError(
            f"The gate {name} takes {NUM_PARAMS[name]} parameter(s), got {len(params)}."
        )
