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
Tests for the single-device adjoint Jacobian, :class:`~.AdjointJacobian`.
"""
# pylint: disable=too-many-arguments
import importlib
import threading

import numpy as np
import pytest
from reference import finite_diff_jacobian, run_circuit

from mgpu_adjoint import (
    AdjointJacobian,
    DevTag,
    InvalidArgumentError,
    Operation,
    OpsData,
    StateVector,
    UnsupportedOperationError,
    adjoint_jacobian,
    hamiltonian,
    hermitian_obs,
    named_obs,
    tensor_prod_obs,
)

# the subpackage re-exports a function of the same name as this module
aj = importlib.import_module("mgpu_adjoint.algorithms.adjoint_jacobian")

HERMITIAN = np.array([[1, 0, 0.5j, 0], [0, -1, 0, 0], [-0.5j, 0, 2, 0.3], [0, 0, 0.3, 0]])

GATE_FAMILIES = [
    ("RX", [1]),
    ("RY", [2]),
    ("RZ", [0]),
    ("PhaseShift", [1]),
    ("IsingXX", [0, 2]),
    ("IsingYY", [2, 1]),
    ("IsingZZ", [1, 0]),
    ("CRX", [2, 0]),
    ("CRY", [0, 1]),
    ("CRZ", [1, 2]),
    ("ControlledPhaseShift", [0, 2]),
    ("SingleExcitation", [2, 0]),
    ("SingleExcitationMinus", [0, 1]),
    ("SingleExcitationPlus", [1, 2]),
    ("DoubleExcitation", [3, 0, 2, 1]),
    ("DoubleExcitationMinus", [0, 1, 2, 3]),
    ("DoubleExcitationPlus", [1, 3, 0, 2]),
    ("MultiRZ", [2, 0]),
    ("MultiRZ", [0, 1, 2]),
]


def circuit(name, wires, theta, inverse=False):
    """A tape with the gate under test between other parametric and fixed gates."""
    return OpsData(
        [
            Operation("RY", (0.4,), (0,)),
            Operation("RX", (-0.3,), (1,)),
            Operation("Hadamard", (), (2,)),
            Operation("CNOT", (), (0, 2)),
            Operation(name, (theta,), wires, inverse),
            Operation("CZ", (), (1, 0)),
            Operation("RZ", (0.25,), (2,)),
            Operation("SX", (), (1,)),
        ]
    )


def observables():
    return [
        named_obs("PauliZ", [0]),
        tensor_prod_obs(named_obs("PauliX", [1]), named_obs("PauliZ", [2])),
        hermitian_obs(HERMITIAN, [2, 0]),
    ]


class TestValidation:
    """Tests for the checks performed before any state is built"""

    @pytest.fixture
    def ops(self):
        return OpsData([Operation("RX", (0.1,), (0,)), Operation("RY", (0.2,), (1,))])

    def test_no_trainable_params(self, ops, zero_state):
        """Test that an empty trainable list fails and leaves the buffer untouched."""
        jac = np.full(2, 7.0)

        with pytest.raises(InvalidArgumentError, match="No trainable parameters provided."):
            adjoint_jacobian(zero_state(2), jac, [named_obs("PauliZ", [0])], ops, [])

        assert np.all(jac == 7.0)

    def test_multi_param_operation(self, zero_state):
        """Test that operations with more than one parameter are rejected."""
        ops = OpsData([Operation("Rot", (0.1, 0.2, 0.3), (0,)), Operation("RX", (0.1,), (0,))])

        with pytest.raises(
            UnsupportedOperationError,
            match="The Rot operation is not supported using the adjoint differentiation method",
        ):
            adjoint_jacobian(zero_state(1), np.zeros(1), [named_obs("PauliZ", [0])], ops, [1])

    @pytest.mark.parametrize("trainable", [[1, 0], [0, 0], [2], [-1]])
    def test_invalid_trainable_params(self, ops, trainable, zero_state):
        """Test that trainable positions must be ascending and in range."""
        jac = np.zeros(len(trainable))

        with pytest.raises(InvalidArgumentError, match="Trainable parameters"):
            adjoint_jacobian(zero_state(2), jac, [named_obs("PauliZ", [0])], ops, trainable)

    def test_jacobian_size(self, ops, zero_state):
        with pytest.raises(InvalidArgumentError, match="2 observables x 2 parameters"):
            adjoint_jacobian(
                zero_state(2),
                np.zeros(3),
                [named_obs("PauliZ", [0]), named_obs("PauliZ", [1])],
                ops,
                [0, 1],
            )

    def test_jacobian_not_contiguous(self, ops, zero_state):
        jac = np.zeros((2, 4))[:, ::2]

        with pytest.raises(InvalidArgumentError, match="C-contiguous"):
            obs = [named_obs("PauliZ", [0]), named_obs("PauliZ", [1])]
            adjoint_jacobian(zero_state(2), jac, obs, ops, [0, 1])

    def test_state_length(self, ops):
        with pytest.raises(InvalidArgumentError, match="power of two"):
            adjoint_jacobian(np.ones(6), np.zeros(1), [named_obs("PauliZ", [0])], ops, [0])

    def test_no_state_work_on_error(self, ops, zero_state, mocker):
        """Test that invalid arguments are rejected before any state vector is created."""
        spy = mocker.spy(StateVector, "from_data")

        with pytest.raises(InvalidArgumentError):
            adjoint_jacobian(zero_state(2), np.zeros(5), [named_obs("PauliZ", [0])], ops, [0])

        spy.assert_not_called()

    def test_trainable_without_generator(self, zero_state):
        """Test that a trainable custom gate without a generator is rejected."""
        ops = OpsData([Operation("MyGate", (0.1,), (0,), matrix=np.eye(2))])

        with pytest.raises(UnsupportedOperationError, match="MyGate"):
            adjoint_jacobian(zero_state(1), np.zeros(1), [named_obs("PauliZ", [0])], ops, [0])


class TestAdjointJacobian:
    """Tests for the values computed by the adjoint method"""

    @pytest.mark.parametrize("theta", np.linspace(-2 * np.pi, 2 * np.pi, 7))
    def test_rx_cnot(self, theta, zero_state, tol):
        """Test the derivative of <Z_1> after RX on wire 0 and a CNOT."""
        ops = OpsData([Operation("RX", (theta,), (0,)), Operation("CNOT", (), (0, 1))])
        jac = np.zeros((1, 1))

        result = AdjointJacobian().adjoint_jacobian(
            zero_state(2), jac, [named_obs("PauliZ", [1])], ops, [0], apply_operations=True
        )

        assert result is jac
        assert np.isclose(jac[0, 0], -np.sin(theta), atol=tol, rtol=0)

    def test_post_circuit_state(self, zero_state, tol):
        """Test that the reference state may already include the circuit."""
        theta = 0.7
        ops = OpsData([Operation("RX", (theta,), (0,)), Operation("CNOT", (), (0, 1))])
        post = run_circuit(zero_state(2), ops)
        jac = np.zeros(1)

        adjoint_jacobian(post, jac, [named_obs("PauliZ", [1])], ops, [0])
        assert np.isclose(jac[0], -np.sin(theta), atol=tol, rtol=0)

    @pytest.mark.parametrize("inverse", [False, True])
    @pytest.mark.parametrize("name, wires", GATE_FAMILIES)
    def test_gate_families(self, name, wires, inverse, init_state, tol):
        """Test every differentiable gate against central finite differences."""
        num_qubits = max(3, len(wires))
        ops = circuit(name, wires, 0.537, inverse)
        obs = observables()
        state = init_state(num_qubits, seed=41)
        trainable = [0, 1, 2, 3]

        jac = np.zeros((len(obs), len(trainable)))
        adjoint_jacobian(state, jac, obs, ops, trainable, apply_operations=True)

        expected = finite_diff_jacobian(state, ops, obs, trainable)
        assert np.allclose(jac, expected, atol=tol, rtol=0)

    def test_sparse_trainable(self, init_state, tol):
        """Test that only the selected parameters are differentiated."""
        ops = circuit("CRY", [0, 1], -0.9)
        obs = observables()
        state = init_state(3, seed=42)

        full = np.zeros((3, 4))
        adjoint_jacobian(state, full, obs, ops, [0, 1, 2, 3], apply_operations=True)

        for trainable in ([0, 2], [1], [3], [1, 3]):
            jac = np.zeros((3, len(trainable)))
            adjoint_jacobian(state, jac, obs, ops, trainable, apply_operations=True)
            assert np.allclose(jac, full[:, trainable], atol=tol, rtol=0)

    def test_state_prep_skipped(self, zero_state, tol):
        """Test that state preparation is neither undone nor counted."""
        prepared = np.array([0, 1, 0, 0], dtype=np.complex128)
        ops = OpsData(
            [
                Operation("StatePrep", tuple(prepared), (0, 1)),
                Operation("RX", (0.3,), (1,)),
                Operation("RY", (-0.6,), (0,)),
            ]
        )
        obs = [named_obs("PauliZ", [1]), named_obs("PauliX", [0])]
        jac = np.zeros((2, 2))
        adjoint_jacobian(prepared, jac, obs, ops, [0, 1], apply_operations=True)

        expected = finite_diff_jacobian(prepared, ops, obs, [0, 1])
        assert np.allclose(jac, expected, atol=tol, rtol=0)

    def test_custom_matrix_operation(self, init_state, tol):
        """Test a tape containing a gate given by an explicit matrix."""
        rng = np.random.default_rng(43)
        q, _ = np.linalg.qr(rng.random((4, 4)) + 1j * rng.random((4, 4)))
        ops = OpsData(
            [
                Operation("RX", (0.2,), (0,)),
                Operation("MyGate", (), (2, 0), matrix=q),
                Operation("IsingXX", (1.1,), (1, 2)),
                Operation("MyGate", (), (0, 1), True, q),
            ]
        )
        obs = observables()
        state = init_state(3, seed=44)
        jac = np.zeros((3, 2))
        adjoint_jacobian(state, jac, obs, ops, [0, 1], apply_operations=True)

        expected = finite_diff_jacobian(state, ops, obs, [0, 1])
        assert np.allclose(jac, expected, atol=tol, rtol=0)

    def test_hamiltonian_linearity(self, zero_state, tol):
        """Test that the Jacobian of a Hamiltonian is the weighted sum of its terms."""
        ops = OpsData(
            [
                Operation("RX", (0.4,), (0,)),
                Operation("RY", (-1.2,), (1,)),
                Operation("CNOT", (), (0, 1)),
            ]
        )
        terms = [named_obs("PauliZ", [0]), named_obs("PauliX", [1])]
        ham = hamiltonian([0.5, 0.5], terms)

        jac_ham = np.zeros((1, 2))
        adjoint_jacobian(zero_state(2), jac_ham, [ham], ops, [0, 1], apply_operations=True)

        jac_terms = np.zeros((2, 2))
        adjoint_jacobian(zero_state(2), jac_terms, terms, ops, [0, 1], apply_operations=True)

        assert np.allclose(jac_ham[0], 0.5 * jac_terms[0] + 0.5 * jac_terms[1], atol=tol, rtol=0)

    def test_repeatable(self, init_state):
        """Test that repeating a computation gives bit-identical results."""
        ops = circuit("IsingYY", [0, 1], 0.3)
        obs = observables()
        state = init_state(3, seed=45)

        first, second = np.zeros((3, 4)), np.zeros((3, 4))
        adjoint_jacobian(state, first, obs, ops, [0, 1, 2, 3], apply_operations=True)
        adjoint_jacobian(state, second, obs, ops, [0, 1, 2, 3], apply_operations=True)

        assert np.array_equal(first, second)

    def test_reference_state_untouched(self, init_state):
        """Test that the caller's state is not modified."""
        state = init_state(3, seed=46)
        original = state.copy()
        sv = StateVector.from_data(state, DevTag(1))
        ops = circuit("RX", [1], 0.2)

        adjoint_jacobian(sv, np.zeros((3, 4)), observables(), ops, [0, 1, 2, 3], True)
        adjoint_jacobian(state, np.zeros((3, 4)), observables(), ops, [0, 1, 2, 3], True)

        assert np.array_equal(sv.data, original)
        assert np.array_equal(state, original)

    def test_state_vector_input(self, init_state, tol):
        """Test that a state vector can be passed as the reference state."""
        state = init_state(3, seed=47)
        ops = circuit("CRZ", [2, 1], 1.3)
        obs = observables()

        from_array, from_sv = np.zeros((3, 4)), np.zeros((3, 4))
        adjoint_jacobian(state, from_array, obs, ops, [0, 1, 2, 3], True)
        adjoint_jacobian(StateVector.from_data(state), from_sv, obs, ops, [0, 1, 2, 3], True)

        assert np.allclose(from_array, from_sv, atol=tol, rtol=0)

    def test_operation_list(self, zero_state, tol):
        """Test that a plain list of operations is accepted as the tape."""
        ops = [Operation("RX", (0.5,), (0,)), Operation("CNOT", (), (0, 1))]
        jac = np.zeros(1)
        adjoint_jacobian(zero_state(2), jac, [named_obs("PauliZ", [1])], ops, [0], True)

        assert np.isclose(jac[0], -np.sin(0.5), atol=tol, rtol=0)

    def test_no_observables(self, zero_state):
        ops = OpsData([Operation("RX", (0.5,), (0,))])
        jac = np.zeros((0, 1))
        assert adjoint_jacobian(zero_state(1), jac, [], ops, [0]) is jac


class TestSweep:
    """Tests for the structure of the backward sweep"""

    def test_stops_after_last_trainable(self, zero_state, mocker):
        """Test that operations before the first trainable gate are not walked."""
        ops = OpsData(
            [
                Operation("Hadamard", (), (0,)),
                Operation("PauliX", (), (1,)),
                Operation("RX", (0.1,), (0,)),
                Operation("RY", (0.2,), (1,)),
            ]
        )
        spy_gen = mocker.spy(StateVector, "apply_generator")
        spy_ops = mocker.spy(StateVector, "apply_operation")

        adjoint_jacobian(zero_state(2), np.zeros(1), [named_obs("PauliZ", [0])], ops, [1])

        assert spy_gen.call_count == 1
        applied = {c.args[1] for c in spy_ops.call_args_list}
        assert applied == {"PauliZ", "RY", "PauliY"}

    def test_fan_out(self, zero_state, mocker):
        """Test that the per-observable work goes through parallel_for with the worker count."""
        spy = mocker.spy(aj, "parallel_for")
        ops = OpsData([Operation("RX", (0.1,), (0,))])
        obs = [named_obs("PauliZ", [0]), named_obs("PauliX", [0])]

        AdjointJacobian(max_workers=3).adjoint_jacobian(zero_state(1), np.zeros(2), obs, ops, [0])

        assert spy.call_count == 3
        assert all(c.args[2] == 3 for c in spy.call_args_list)

    def test_max_workers_from_configuration(self, monkeypatch):
        monkeypatch.setattr(aj.default_config, "_config", {"adjoint": {"max_workers": 5}})
        assert AdjointJacobian().max_workers == 5
        assert AdjointJacobian(2).max_workers == 2

    def test_create_ops_data(self):
        ops = AdjointJacobian.create_ops_data(["RX"], [[0.1]], [[0]], [False])
        assert ops == OpsData([Operation("RX", (0.1,), (0,))])

    def test_dev_tag(self, zero_state, mocker):
        """Test that the computation runs on the requested device."""
        spy = mocker.spy(StateVector, "apply_generator")
        ops = OpsData([Operation("RX", (0.1,), (0,))])
        obs = [named_obs("PauliZ", [0])]
        adjoint_jacobian(zero_state(1), np.zeros(1), obs, ops, [0], False, DevTag(2))

        assert spy.call_args.args[0].dev_tag == DevTag(2)

    def test_stop_event(self, zero_state, mocker):
        """Test that a set stop event ends the sweep before any column is computed."""
        stop = threading.Event()
        stop.set()
        spy = mocker.spy(StateVector, "apply_generator")
        ops = OpsData([Operation("RX", (0.1,), (0,)), Operation("RY", (0.2,), (0,))])
        jac = np.full(2, 7.0)

        AdjointJacobian(stop_event=stop).adjoint_jacobian(
            zero_state(1), jac, [named_obs("PauliZ", [0])], ops, [0, 1]
        )

        spy.assert_not_called()
        assert np.all(jac == 7.0)

    def test_unset_stop_event(self, zero_state, tol):
        ops = OpsData([Operation("RX", (0.1,), (0,))])
        jac = np.zeros(1)

        AdjointJacobian(stop_event=threading.Event()).adjoint_jacobian(
            zero_state(1), jac, [named_obs("PauliZ", [0])], ops, [0]
        )

        assert np.isclose(jac[0], -np.sin(0.1), atol=tol, rtol=0)
