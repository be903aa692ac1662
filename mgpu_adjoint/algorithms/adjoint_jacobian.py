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
This module contains the adjoint method of
`Jones and Gacon <https://arxiv.org/abs/2009.02823>`__ for the Jacobian of
expectation values, on a single device and batched over a device pool.

Given the post-circuit state :math:`|\lambda\rangle` and observables
:math:`H_i`, the circuit is scanned backwards. Each gate is undone on
:math:`|\lambda\rangle` and on every :math:`H_i|\lambda\rangle`, and for each
trainable gate :math:`U(\theta) = e^{i s \theta G}` the Jacobian entry

.. math::

    \frac{\partial \langle H_i \rangle}{\partial \theta}
    = -2 s\, \mathrm{Im}\langle H_i \lambda | G \lambda \rangle

is read off before the gate is undone. The cost is a single backward sweep,
independent of the number of trainable parameters.
"""
import logging
import threading

import numpy as np

from mgpu_adjoint.concurrency import parallel_for
from mgpu_adjoint.configuration import default_config
from mgpu_adjoint.devices import DevTag, GateCache, StateVector, get_device_pool
from mgpu_adjoint.devices.statevector import infer_like
from mgpu_adjoint.exceptions import InvalidArgumentError, UnsupportedOperationError
from mgpu_adjoint.logging import TRACE, debug_logger, debug_logger_init
from mgpu_adjoint.observables import apply_in_place
from mgpu_adjoint.tape import STATE_PREP_OPS, OpsData, create_ops_data

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class AdjointJacobian:
    """Adjoint Jacobian of expectation values on a single device.

    Args:
        max_workers (int): number of threads used for the per-observable work. Defaults
            to the ``adjoint.max_workers`` configuration key, or the ``ThreadPoolExecutor``
            default if unset. ``1`` disables the fan-out.
        stop_event (threading.Event): when set, a running sweep returns before its next
            step and leaves the Jacobian undefined. Shared by the shards of a batched
            computation so that one failing shard stops the others.

    **Example**

    >>> ops = create_ops_data(["RX", "CNOT"], [[0.4], []], [[0], [0, 1]], [False, False])
    >>> ref = np.array([1, 0, 0, 0], dtype=np.complex128)
    >>> jac = np.zeros((1, 1))
    >>> AdjointJacobian().adjoint_jacobian(
    ...     ref, jac, [named_obs("PauliZ", [1])], ops, [0], apply_operations=True
    ... )
    array([[-0.38941834]])
    """

    @debug_logger_init
    def __init__(self, max_workers=None, stop_event=None):
        if max_workers is None:
            max_workers = default_config.get("adjoint.max_workers")
        self._max_workers = max_workers
        self._stop_event = stop_event

    @property
    def max_workers(self):
        """int: number of threads used for the per-observable work"""
        return self._max_workers

    @staticmethod
    def create_ops_data(ops_name, ops_params, ops_wires, ops_inverses, ops_matrices=None):
        """Build a tape from parallel lists of operation fields.

        See :func:`~.create_ops_data`.
        """
        return create_ops_data(ops_name, ops_params, ops_wires, ops_inverses, ops_matrices)

    @debug_logger
    def adjoint_jacobian(
        self,
        ref_data,
        jac,
        observables,
        ops,
        trainable_params,
        apply_operations=False,
        dev_tag=None,
    ):  # pylint: disable=too-many-arguments
        """Compute the Jacobian of the expectation values of ``observables`` with respect
        to the trainable gate parameters of ``ops``.

        Args:
            ref_data (array[complex] or StateVector): the post-circuit state, or the
                pre-circuit state if ``apply_operations`` is set
            jac (array[float]): C-contiguous buffer of ``len(observables) * len(trainable_params)``
                entries, filled in row-major order with one row per observable
            observables (Sequence[Observable]): the measured observables
            ops (OpsData or Sequence[Operation]): the circuit
            trainable_params (Sequence[int]): strictly ascending positions of the
                trainable gates among all parametric gates of the circuit
            apply_operations (bool): apply ``ops`` to ``ref_data`` before the sweep
            dev_tag (DevTag): device the computation runs on

        Returns:
            array[float]: ``jac``, filled in place

        Raises:
            InvalidArgumentError: if no trainable parameters are given, the trainable
                positions are not valid, or ``jac`` or ``ref_data`` have the wrong size
            UnsupportedOperationError: if an operation carries more than one parameter,
                or a trainable operation has no registered generator
        """
        ops = _as_ops_data(ops)
        trainable_params = [int(t) for t in trainable_params]
        _check_arguments(ref_data, jac, observables, ops, trainable_params)

        dev_tag = dev_tag or DevTag()
        dev_tag.refresh()
        jac_view = np.reshape(jac, (len(observables), len(trainable_params)))

        gate_cache = GateCache(populate=True, dev_tag=dev_tag, like=infer_like(ref_data))
        lam = StateVector.from_data(ref_data, dev_tag, gate_cache=gate_cache)
        logger.debug(
            "Computing adjoint Jacobian of %d observable(s) for %d trainable parameter(s) "
            "on %d qubits, %s",
            len(observables),
            len(trainable_params),
            lam.num_qubits,
            dev_tag,
        )

        if apply_operations:
            lam.apply_operations(ops)

        self._sweep(lam, jac_view, observables, ops, trainable_params)
        return jac

    def _apply_observables(self, lam, observables):
        def _apply(obs):
            bra = lam.copy()
            apply_in_place(obs, bra)
            return bra

        return parallel_for(_apply, observables, self._max_workers, stop_event=self._stop_event)

    def _sweep(self, lam, jac, observables, ops, trainable_params):
        bras = self._apply_observables(lam, observables)
        mu = lam.zeros_like()

        tp_idx = len(trainable_params) - 1
        param_idx = ops.num_par_ops - 1

        for op in reversed(ops):
            if op.name in STATE_PREP_OPS:
                continue

            if tp_idx < 0:
                break

            if self._stopped():
                logger.debug("Sweep stopped with %d column(s) left", tp_idx + 1)
                return

            mu.update_data(lam)
            lam.apply_operation(op.name, op.wires, not op.inverse, op.params, op.matrix)

            if op.params:
                if param_idx == trainable_params[tp_idx]:
                    scaling = mu.apply_generator(op.name, op.wires, op.inverse)
                    jac[:, tp_idx] = parallel_for(
                        lambda bra, c=scaling: -2 * c * bra.inner_product(mu).imag,
                        bras,
                        self._max_workers,
                        stop_event=self._stop_event,
                    )
                    if logger.isEnabledFor(TRACE):
                        logger.log(
                            TRACE, "Column %d from %s on wires %s", tp_idx, op.name, op.wires
                        )
                    tp_idx -= 1
                param_idx -= 1

            parallel_for(
                lambda bra, op=op: bra.apply_operation(
                    op.name, op.wires, not op.inverse, op.params, op.matrix
                ),
                bras,
                self._max_workers,
                stop_event=self._stop_event,
            )

    def _stopped(self):
        return self._stop_event is not None and self._stop_event.is_set()


@debug_logger
def adjoint_jacobian(
    ref_data, jac, observables, ops, trainable_params, apply_operations=False, dev_tag=None
):
    """Single-device adjoint Jacobian with the default worker count.

    See :meth:`AdjointJacobian.adjoint_jacobian`.
    """
    return AdjointJacobian().adjoint_jacobian(
        ref_data, jac, observables, ops, trainable_params, apply_operations, dev_tag
    )


def partition_observables(num_observables, num_chunks):
    """Split ``range(num_observables)`` into ``num_chunks`` contiguous ranges.

    The sizes of the ranges differ by at most one, with the larger ranges first.
    Ranges are empty when there are fewer observables than chunks.

    Args:
        num_observables (int): number of observables
        num_chunks (int): number of ranges

    Returns:
        list[tuple[int, int]]: half-open ``(start, stop)`` bounds, in order

    **Example**

    >>> partition_observables(5, 3)
    [(0, 2), (2, 4), (4, 5)]
    >>> partition_observables(1, 3)
    [(0, 1), (1, 1), (1, 1)]
    """
    if num_chunks < 1:
        raise InvalidArgumentError(f"At least one chunk is required, got {num_chunks}.")

    size, extra = divmod(num_observables, num_chunks)
    bounds = []
    start = 0
    for chunk in range(num_chunks):
        stop = start + size + (1 if chunk < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


@debug_logger
def batch_adjoint_jacobian(
    ref_data,
    jac,
    observables,
    ops,
    trainable_params,
    apply_operations=False,
    device_pool=None,
):  # pylint: disable=too-many-arguments
    """Compute the adjoint Jacobian with the observables sharded over a device pool.

    The observables are split into one contiguous shard per device. Every shard runs
    the full sweep on its own device and copy of the state, with no further
    per-observable fan-out, and the shard results are copied into ``jac`` in
    shard order.

    Args:
        ref_data (array[complex] or StateVector): the post-circuit state, or the
            pre-circuit state if ``apply_operations`` is set
        jac (array[float]): C-contiguous buffer of ``len(observables) * len(trainable_params)``
            entries, filled in row-major order with one row per observable
        observables (Sequence[Observable]): the measured observables
        ops (OpsData or Sequence[Operation]): the circuit
        trainable_params (Sequence[int]): strictly ascending positions of the
            trainable gates among all parametric gates of the circuit
        apply_operations (bool): apply ``ops`` to ``ref_data`` before the sweep
        device_pool (DevicePool): devices to shard over. Defaults to the
            process-wide pool.

    Returns:
        array[float]: ``jac``, filled in place

    Raises:
        InvalidArgumentError: if no trainable parameters are given, the trainable
            positions are not valid, or ``jac`` or ``ref_data`` have the wrong size
        UnsupportedOperationError: if an operation carries more than one parameter
    """
    ops = _as_ops_data(ops)
    trainable_params = [int(t) for t in trainable_params]
    _check_arguments(ref_data, jac, observables, ops, trainable_params)

    pool = device_pool or get_device_pool()
    num_chunks = pool.get_total_devices()
    bounds = partition_observables(len(observables), num_chunks)
    host_data = ref_data.data if isinstance(ref_data, StateVector) else ref_data
    num_params = len(trainable_params)
    stop_event = threading.Event()

    def _shard(bound):
        start, stop = bound
        if start == stop or stop_event.is_set():
            return np.zeros((0, num_params))

        with pool.device() as device_id:
            logger.debug("Shard [%d, %d) running on device %d", start, stop, device_id)
            block = np.zeros((stop - start, num_params))
            AdjointJacobian(max_workers=1, stop_event=stop_event).adjoint_jacobian(
                host_data,
                block,
                observables[start:stop],
                ops,
                list(trainable_params),
                apply_operations,
                DevTag(device_id),
            )
        return block

    blocks = parallel_for(_shard, bounds, max_workers=num_chunks, stop_event=stop_event)

    jac_view = np.reshape(jac, (len(observables), num_params))
    for (start, stop), block in zip(bounds, blocks):
        jac_view[start:stop] = block
    return jac


def _as_ops_data(ops):
    return ops if isinstance(ops, OpsData) else OpsData(ops)


def _num_amplitudes(ref_data):
    if isinstance(ref_data, StateVector):
        return ref_data.length
    return int(np.size(ref_data))


def _check_arguments(ref_data, jac, observables, ops, trainable_params):
    """Validate the inputs of a Jacobian computation before any state is built."""
    if not trainable_params:
        raise InvalidArgumentError("No trainable parameters provided.")

    for op in ops:
        if op.name not in STATE_PREP_OPS and len(op.params) > 1:
            raise UnsupportedOperationError(
                f"The {op.name} operation is not supported using the adjoint differentiation method"
            )

    if any(a >= b for a, b in zip(trainable_params, trainable_params[1:])):
        raise InvalidArgumentError(
            f"Trainable parameters must be strictly ascending, got {trainable_params}."
        )

    if trainable_params[0] < 0 or trainable_params[-1] >= ops.num_par_ops:
        raise InvalidArgumentError(
            f"Trainable parameters {trainable_params} are out of range for a circuit "
            f"with {ops.num_par_ops} parametric operation(s)."
        )

    expected = len(observables) * len(trainable_params)
    if not isinstance(jac, np.ndarray) or jac.size != expected:
        raise InvalidArgumentError(
            f"The Jacobian buffer must be an array of {expected} entries "
            f"({len(observables)} observables x {len(trainable_params)} parameters)."
        )
    if not jac.flags.c_contiguous:
        raise InvalidArgumentError("The Jacobian buffer must be C-contiguous.")

    length = _num_amplitudes(ref_data)
    if length < 1 or length & (length - 1):
        raise InvalidArgumentError(f"State vector length must be a power of two, got {length}.")
