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
This module contains the :class:`Operation` record and the :class:`OpsData`
tape describing a circuit to differentiate.
"""
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from mgpu_adjoint.exceptions import InvalidArgumentError

#: operations that prepare the initial state; they are never applied as gates
#: and never differentiated
STATE_PREP_OPS = frozenset(["QubitStateVector", "StatePrep", "BasisState"])


@dataclass(frozen=True)
class Operation:
    """A single gate of a circuit.

    Args:
        name (str): name of the gate
        params (tuple[float]): gate parameters
        wires (tuple[int]): wires the gate acts on
        inverse (bool): whether the adjoint of the gate is applied
        matrix (tuple[complex]): optional row-major unitary of a custom gate,
            used in place of the named gate
    """

    name: str
    params: Tuple[float, ...] = ()
    wires: Tuple[int, ...] = ()
    inverse: bool = False
    matrix: Optional[Tuple[complex, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))
        object.__setattr__(self, "wires", tuple(int(w) for w in self.wires))
        if self.matrix is not None:
            object.__setattr__(self, "matrix", tuple(complex(m) for m in np.ravel(self.matrix)))

    @property
    def num_params(self):
        """int: number of gate parameters"""
        return len(self.params)

    @property
    def is_state_prep(self):
        """bool: whether this is a state-preparation operation"""
        return self.name in STATE_PREP_OPS


class OpsData(Sequence):
    """Immutable, ordered tape of operations.

    Args:
        operations (Iterable[Operation]): the operations, in circuit order

    **Example**

    >>> ops = OpsData([Operation("RX", (0.4,), (0,)), Operation("CNOT", wires=(0, 1))])
    >>> ops.num_par_ops
    1
    >>> ops.ops_name
    ('RX', 'CNOT')
    """

    def __init__(self, operations):
        self._ops = tuple(operations)
        self._num_par_ops = sum(1 for op in self._ops if op.params and not op.is_state_prep)

    def __getitem__(self, idx):
        return self._ops[idx]

    def __len__(self):
        return len(self._ops)

    def __eq__(self, other):
        return isinstance(other, OpsData) and self._ops == other._ops

    def __hash__(self):
        return hash(self._ops)

    def __repr__(self):
        return f"OpsData({list(self._ops)!r})"

    @property
    def num_par_ops(self):
        """int: number of operations carrying at least one parameter, state
        preparation excluded"""
        return self._num_par_ops

    def has_params(self, idx):
        """Whether the operation at position ``idx`` carries parameters."""
        return bool(self._ops[idx].params)

    @property
    def ops_name(self):
        return tuple(op.name for op in self._ops)

    @property
    def ops_params(self):
        return tuple(op.params for op in self._ops)

    @property
    def ops_wires(self):
        return tuple(op.wires for op in self._ops)

    @property
    def ops_inverses(self):
        return tuple(op.inverse for op in self._ops)

    @property
    def ops_matrices(self):
        return tuple(op.matrix for op in self._ops)


def create_ops_data(ops_name, ops_params, ops_wires, ops_inverses, ops_matrices=None):
    """Build an :class:`OpsData` tape from parallel lists of operation fields.

    Args:
        ops_name (Sequence[str]): gate names
        ops_params (Sequence[Sequence[float]]): parameters of each gate
        ops_wires (Sequence[Sequence[int]]): wires of each gate
        ops_inverses (Sequence[bool]): inverse flags
        ops_matrices (Sequence[array[complex] or None]): optional custom matrices;
            an empty entry means the named gate is used

    Returns:
        OpsData: the tape

    Raises:
        InvalidArgumentError: if the lists have different lengths
    """
    if ops_matrices is None:
        ops_matrices = [None] * len(ops_name)

    lengths = {len(ops_name), len(ops_params), len(ops_wires), len(ops_inverses), len(ops_matrices)}
    if len(lengths) != 1:
        raise InvalidArgumentError(
            "All operation lists must have the same length; got "
            f"names={len(ops_name)}, params={len(ops_params)}, wires={len(ops_wires)}, "
            f"inverses={len(ops_inverses)}, matrices={len(ops_matrices)}."
        )

    return OpsData(
        Operation(name, params, wires, bool(inverse), matrix if _non_empty(matrix) else None)
        for name, params, wires, inverse, matrix in zip(
            ops_name, ops_params, ops_wires, ops_inverses, ops_matrices
        )
    )


def _non_empty(matrix):
    return matrix is not None and len(matrix) > 0
