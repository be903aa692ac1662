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
This module contains the :class:`StateVector`, a device-tagged amplitude buffer
together with the gate kernels used by the adjoint Jacobian engine.

The amplitudes are stored as a flat array of length :math:`2^n`, with wire ``0``
the most significant bit of the basis-state index. Array operations are
dispatched through ``autoray``, so the buffer can be held by any array library
with a NumPy-like API (``numpy`` by default).
"""
# pylint: disable=unused-argument
from string import ascii_letters as ABC

import autoray as ar
import numpy as np

from mgpu_adjoint.exceptions import (
    DeviceConsistencyError,
    InvalidArgumentError,
    UnsupportedOperationError,
    WireError,
)
from mgpu_adjoint.ops import gates
from mgpu_adjoint.ops.generators import apply_generator
from mgpu_adjoint.tape import STATE_PREP_OPS

from .dev_tag import DevTag
from .gate_cache import GateCache


def _get_slice(index, axis, num_axes):
    """Index tuple selecting ``index`` on one axis and everything on the others.

    >>> _get_slice(slice(1, 2), 1, 3)
    (slice(None, None, None), slice(1, 2, None), slice(None, None, None))
    """
    idx = [slice(None)] * num_axes
    idx[axis] = index
    return tuple(idx)


def _is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def infer_like(data):
    """Name of the array library holding ``data``; plain Python sequences map to ``"numpy"``."""
    if isinstance(data, StateVector):
        data = data.data
    backend = ar.infer_backend(data)
    return "numpy" if backend == "builtins" else backend


class StateVector:
    r"""State vector of ``num_qubits`` qubits living on a single device.

    A new state vector is initialised to :math:`|0\dots 0\rangle`. Use
    :meth:`from_data` to copy existing amplitudes into a new buffer.

    Args:
        num_qubits (int): number of qubits
        dev_tag (DevTag): device and stream the buffer lives on
        c_dtype (type): complex data type of the amplitudes
        like (str): array library holding the amplitudes, e.g. ``"numpy"``
        gate_cache (GateCache): cache of device-resident gate matrices. It must live
            on the same device. A new, empty cache is created if not provided.

    **Example**

    >>> sv = StateVector(2)
    >>> sv.apply_operation("Hadamard", [0])
    >>> sv.apply_operation("CNOT", [0, 1])
    >>> sv.data
    array([0.70710678+0.j, 0.        +0.j, 0.        +0.j, 0.70710678+0.j])
    """

    def __init__(
        self, num_qubits, dev_tag=None, *, c_dtype=np.complex128, like="numpy", gate_cache=None
    ):
        self._num_qubits = num_qubits
        self._dev_tag = dev_tag or DevTag()
        self._c_dtype = c_dtype
        self._like = like

        if gate_cache is None:
            gate_cache = GateCache(dev_tag=self._dev_tag, like=like, c_dtype=c_dtype)
        elif gate_cache.dev_tag.device_id != self._dev_tag.device_id:
            raise DeviceConsistencyError(
                f"Gate cache on {gate_cache.dev_tag} cannot serve a state on {self._dev_tag}."
            )
        self._gate_cache = gate_cache

        self._data = ar.do("zeros", 2**num_qubits, dtype=c_dtype, like=like)
        self._data[0] = 1

        self._apply_ops = {
            "PauliX": self._apply_x,
            "PauliY": self._apply_y,
            "PauliZ": self._apply_z,
            "Hadamard": self._apply_hadamard,
            "S": self._apply_s,
            "T": self._apply_t,
            "SX": self._apply_sx,
            "CNOT": self._apply_cnot,
            "SWAP": self._apply_swap,
            "CZ": self._apply_cz,
            "Toffoli": self._apply_toffoli,
        }

    @classmethod
    def from_data(cls, data, dev_tag=None, *, c_dtype=None, like=None, gate_cache=None):
        """Create a state vector holding a copy of the given amplitudes.

        Args:
            data (array[complex] or StateVector): amplitudes of length :math:`2^n`
            dev_tag (DevTag): device the copy is placed on
            c_dtype (type): complex data type; defaults to ``complex128``
            like (str): array library of the copy; defaults to the library of ``data``
            gate_cache (GateCache): cache of device-resident gate matrices

        Returns:
            StateVector: the new state vector

        Raises:
            InvalidArgumentError: if the number of amplitudes is not a power of two
        """
        if isinstance(data, StateVector):
            c_dtype = c_dtype or data.c_dtype
            data = data.data

        like = like or infer_like(data)
        c_dtype = c_dtype or np.complex128
        length = int(np.size(data))

        if not _is_power_of_two(length):
            raise InvalidArgumentError(
                f"State vector length must be a power of two, got {length}."
            )

        sv = cls(
            length.bit_length() - 1, dev_tag, c_dtype=c_dtype, like=like, gate_cache=gate_cache
        )
        sv._data = ar.do("reshape", ar.do("array", data, dtype=c_dtype, like=like), (length,))
        return sv

    def __repr__(self):
        return f"<StateVector: qubits={self._num_qubits}, {self._dev_tag}>"

    @property
    def data(self):
        """array[complex]: the flat amplitude buffer"""
        return self._data

    @property
    def length(self):
        """int: number of amplitudes"""
        return 2**self._num_qubits

    @property
    def num_qubits(self):
        """int: number of qubits"""
        return self._num_qubits

    @property
    def dev_tag(self):
        """DevTag: device and stream the buffer lives on"""
        return self._dev_tag

    @property
    def c_dtype(self):
        """type: complex data type of the amplitudes"""
        return self._c_dtype

    @property
    def gate_cache(self):
        """GateCache: cache of device-resident gate matrices"""
        return self._gate_cache

    # -------------------------------------------------------------------------
    # Buffer operations
    # -------------------------------------------------------------------------

    def copy(self):
        """Return an independent copy on the same device, sharing the gate cache."""
        return StateVector.from_data(
            self._data,
            self._dev_tag,
            c_dtype=self._c_dtype,
            like=self._like,
            gate_cache=self._gate_cache,
        )

    def zeros_like(self):
        """Return an all-zero buffer of the same size on the same device."""
        sv = self.copy()
        sv._data = ar.do("zeros_like", self._data)
        return sv

    def update_data(self, other):
        """Overwrite the amplitudes with those of ``other``.

        Raises:
            DeviceConsistencyError: if ``other`` lives on a different device
        """
        self._check_same_device(other)
        if other.length != self.length:
            raise InvalidArgumentError(
                f"Cannot copy {other.length} amplitudes into a buffer of {self.length}."
            )
        self._data[...] = other.data

    def inner_product(self, other):
        r"""Inner product :math:`\langle \mathrm{self} | \mathrm{other}\rangle`,
        conjugate-linear in ``self``.

        Raises:
            DeviceConsistencyError: if ``other`` lives on a different device
        """
        self._check_same_device(other)
        return complex(ar.to_numpy(ar.do("vdot", self._data, other.data)))

    def scale_and_add(self, coeff, other):
        """In-place update ``self += coeff * other``.

        Raises:
            DeviceConsistencyError: if ``other`` lives on a different device
        """
        self._check_same_device(other)
        self._data += coeff * other.data

    def _check_same_device(self, other):
        if other.dev_tag.device_id != self._dev_tag.device_id:
            raise DeviceConsistencyError("Data exists on different GPUs. Aborting.")

    # -------------------------------------------------------------------------
    # Gate application
    # -------------------------------------------------------------------------

    def apply_operations(self, operations, adjoint=False):
        """Apply a sequence of operations. State-preparation operations are skipped.

        Args:
            operations (Iterable[Operation]): operations to apply, in forward order
            adjoint (bool): apply the adjoint of the whole sequence, i.e. undo each
                operation in reverse order
        """
        operations = reversed(list(operations)) if adjoint else operations
        for op in operations:
            if op.name in STATE_PREP_OPS:
                continue
            self.apply_operation(op.name, op.wires, op.inverse ^ adjoint, op.params, op.matrix)

    def apply_operation(self, name, wires, inverse=False, params=(), matrix=None):
        """Apply a gate to the state in place.

        Args:
            name (str): name of the gate
            wires (Sequence[int]): wires the gate acts on
            inverse (bool): apply the adjoint of the gate
            params (Sequence[float]): gate parameters
            matrix (array[complex]): explicit matrix of a custom gate. Takes
                precedence over ``name``.

        Raises:
            UnsupportedOperationError: if the gate is unknown and no matrix is given
            WireError: if the wires do not fit the state or the gate
        """
        wires = self._validate_wires(wires)

        if matrix is not None:
            self.apply_matrix(matrix, wires, inverse)
            return

        if name == "Identity":
            return

        state = self._tensor()
        if name in self._apply_ops:
            self._check_num_wires(name, wires, _KERNEL_WIRES[name])
            state = self._apply_ops[name](state, wires, inverse=inverse)
        elif name == "MultiRZ":
            if len(params) != 1:
                raise UnsupportedOperationError(
                    f"The gate MultiRZ takes 1 parameter(s), got {len(params)}."
                )
            phases = ar.do(
                "asarray",
                gates.multi_rz_eigvals(params[0], len(wires)),
                dtype=self._c_dtype,
                like=self._like,
            )
            state = self._apply_diagonal_unitary(state, self._conj(phases, inverse), wires)
        else:
            mat = self._get_gate(name, params)
            self._check_num_wires(name, wires, ar.shape(mat)[0].bit_length() - 1)
            if name in gates.DIAGONAL_GATES:
                phases = ar.do("diagonal", mat)
                state = self._apply_diagonal_unitary(state, self._conj(phases, inverse), wires)
            else:
                state = self._apply_matrix_tensor(state, self._dagger(mat, inverse), wires)

        self._data = ar.do("reshape", state, (self.length,))

    def apply_matrix(self, matrix, wires, inverse=False):
        """Apply an arbitrary square matrix to the given wires in place.

        Args:
            matrix (array[complex]): matrix of size :math:`2^k \\times 2^k`, either square
                or flattened in row-major order
            wires (Sequence[int]): the ``k`` wires the matrix acts on
            inverse (bool): apply the conjugate transpose of the matrix

        Raises:
            InvalidArgumentError: if the matrix size does not match the number of wires
        """
        wires = self._validate_wires(wires)
        dim = 2 ** len(wires)
        mat = ar.do("asarray", matrix, dtype=self._c_dtype, like=self._like)

        if int(np.size(mat)) != dim**2:
            raise InvalidArgumentError(
                f"A matrix acting on {len(wires)} wires must have {dim ** 2} entries, "
                f"got {int(np.size(mat))}."
            )

        mat = self._dagger(ar.do("reshape", mat, (dim, dim)), inverse)
        state = self._apply_matrix_tensor(self._tensor(), mat, wires)
        self._data = ar.do("reshape", state, (self.length,))

    def apply_generator(self, name, wires, adjoint=False):
        """Apply the generator of a differentiable gate in place.

        Args:
            name (str): name of the gate
            wires (Sequence[int]): wires of the gate
            adjoint (bool): whether the gate appears inverted in the circuit

        Returns:
            float: the generator scaling factor, negated if ``adjoint``
        """
        return apply_generator(self, name, self._validate_wires(wires), adjoint)

    def apply_projector(self, wires, values):
        r"""Project onto the computational basis values of the given wires, in place.

        Amplitudes for which any of the wires differs from its value are zeroed,
        e.g. ``apply_projector([0], [1])`` applies :math:`|1\rangle\langle 1|` to wire 0.

        Args:
            wires (Sequence[int]): wires to project
            values (Sequence[int]): basis value (0 or 1) kept on each wire
        """
        wires = self._validate_wires(wires)
        state = self._tensor()
        ndim = self._num_qubits
        for wire, value in zip(wires, values):
            state[_get_slice(1 - value, wire, ndim)] = 0

    def _get_gate(self, name, params):
        """Device matrix of a named gate, served from the gate cache."""
        params = tuple(params)
        if name in gates.FIXED_GATES:
            key = 0.0
        elif len(params) == 1:
            key = params[0]
        else:
            key = params

        return self._gate_cache.get_or_add(name, key, lambda: gates.gate_matrix(name, params))

    def _validate_wires(self, wires):
        wires = tuple(int(w) for w in wires)

        if len(set(wires)) != len(wires):
            raise WireError(f"Wires must be unique; got {list(wires)}.")

        for w in wires:
            if not 0 <= w < self._num_qubits:
                raise WireError(
                    f"Wire {w} is not available on a state vector with {self._num_qubits} qubits."
                )
        return wires

    @staticmethod
    def _check_num_wires(name, wires, expected):
        if len(wires) != expected:
            raise WireError(f"The gate {name} acts on {expected} wire(s), got {len(wires)}.")

    def _tensor(self):
        return ar.do("reshape", self._data, (2,) * self._num_qubits)

    @staticmethod
    def _conj(array, inverse):
        return ar.do("conj", array) if inverse else array

    @staticmethod
    def _dagger(mat, inverse):
        return ar.do("transpose", ar.do("conj", mat)) if inverse else mat

    # -------------------------------------------------------------------------
    # Kernels. Each takes the state as a tensor of shape [2] * num_qubits and
    # the affected axes, and returns a new tensor of the same shape.
    # -------------------------------------------------------------------------

    def _apply_x(self, state, axes, **kwargs):
        r"""Bit flip on one axis.

        A roll by one position along an axis of length two swaps the
        :math:`|0\rangle` and :math:`|1\rangle` halves.
        """
        return ar.do("roll", state, 1, axes[0])

    def _apply_y(self, state, axes, **kwargs):
        # Y = iXZ
        return 1j * self._apply_x(self._apply_z(state, axes), axes)

    def _apply_z(self, state, axes, **kwargs):
        return self._apply_phase(state, axes, -1)

    def _apply_hadamard(self, state, axes, **kwargs):
        return gates.SQRT2INV * (self._apply_x(state, axes) + self._apply_z(state, axes))

    def _apply_s(self, state, axes, inverse=False):
        return self._apply_phase(state, axes, 1j, inverse)

    def _apply_t(self, state, axes, inverse=False):
        return self._apply_phase(state, axes, gates.TPHASE, inverse)

    def _apply_sx(self, state, axes, inverse=False):
        a, b = (1 - 1j, 1 + 1j) if inverse else (1 + 1j, 1 - 1j)
        return 0.5 * (a * state + b * self._apply_x(state, axes))

    def _apply_cnot(self, state, axes, **kwargs):
        return self._apply_controlled(state, axes[:1], lambda s: self._apply_x(s, axes[1:]))

    def _apply_cz(self, state, axes, **kwargs):
        return self._apply_controlled(state, axes[:1], lambda s: self._apply_z(s, axes[1:]))

    def _apply_toffoli(self, state, axes, **kwargs):
        return self._apply_controlled(state, axes[:2], lambda s: self._apply_x(s, axes[2:]))

    def _apply_swap(self, state, axes, **kwargs):
        perm = list(range(self._num_qubits))
        perm[axes[0]], perm[axes[1]] = axes[1], axes[0]
        return ar.do("transpose", state, perm)

    def _apply_controlled(self, state, controls, target_fn):
        """Apply ``target_fn`` to the block where every control axis is in :math:`|1\\rangle`.

        The blocks are cut with length-one slices, so no axis is dropped and the
        target axes keep their positions.
        """
        if not controls:
            return target_fn(state)

        ndim = self._num_qubits
        off = state[_get_slice(slice(0, 1), controls[0], ndim)]
        on = self._apply_controlled(
            state[_get_slice(slice(1, 2), controls[0], ndim)], controls[1:], target_fn
        )
        return ar.do("concatenate", [off, on], axis=controls[0], like=state)

    def _apply_phase(self, state, axes, phase, inverse=False):
        """Multiply the :math:`|1\\rangle` half of one axis by ``phase``."""
        ndim = self._num_qubits
        phase = np.conj(phase) if inverse else phase
        zero = state[_get_slice(slice(0, 1), axes[0], ndim)]
        one = state[_get_slice(slice(1, 2), axes[0], ndim)]
        return ar.do("concatenate", [zero, phase * one], axis=axes[0], like=state)

    def _apply_matrix_tensor(self, state, mat, wires):
        if len(wires) <= 2:
            return self._apply_unitary_einsum(state, mat, wires)
        return self._apply_unitary(state, mat, wires)

    def _apply_unitary(self, state, mat, wires):
        """Contract a :math:`2^k \\times 2^k` matrix with ``k`` axes of the state."""
        k = len(wires)
        mat = ar.do("reshape", mat, [2] * (2 * k))
        out = ar.do("tensordot", mat, state, axes=(list(range(k, 2 * k)), list(wires)))

        # the contracted axes come out first; move them back to their wires
        rest = [w for w in range(self._num_qubits) if w not in wires]
        return ar.do("transpose", out, np.argsort(list(wires) + rest).tolist())

    def _apply_unitary_einsum(self, state, mat, wires):
        """Matrix contraction written as a single einsum, used for one and two wires."""
        k = len(wires)
        mat = ar.do("reshape", mat, [2] * (2 * k))

        old = ABC[: self._num_qubits]
        summed = "".join(old[w] for w in wires)
        fresh = ABC[self._num_qubits : self._num_qubits + k]
        out = "".join(fresh[wires.index(i)] if i in wires else c for i, c in enumerate(old))

        return ar.do("einsum", f"{fresh}{summed},{old}->{out}", mat, state, like=state)

    def _apply_diagonal_unitary(self, state, phases, wires):
        """Multiply the state by a diagonal gate given as its ``2**k`` eigenvalues."""
        phases = ar.do("reshape", phases, [2] * len(wires))
        old = ABC[: self._num_qubits]
        summed = "".join(old[w] for w in wires)
        return ar.do("einsum", f"{summed},{old}->{old}", phases, state, like=state)


_KERNEL_WIRES = {
    "PauliX": 1,
    "PauliY": 1,
    "PauliZ": 1,
    "Hadamard": 1,
    "S": 1,
    "T": 1,
    "SX": 1,
    "CNOT": 2,
    "SWAP": 2,
    "CZ": 2,
    "Toffoli": 3,
}
