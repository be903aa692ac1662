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
This module contains the observables whose expectation values are differentiated.

.. currentmodule:: mgpu_adjoint.observables

Observables form a closed family of immutable records:

.. autosummary::

    ~NamedObs
    ~HermitianObs
    ~TensorProdObs
    ~Hamiltonian

Each variant is applied to a :class:`~.StateVector` in place with
:func:`apply_in_place`, which dispatches on the type of the observable. Two
observables compare equal only if they are the same variant with equal fields,
so a ``NamedObs("PauliZ", [0])`` never equals a ``HermitianObs`` with the Pauli-Z
matrix.

**Example**

>>> obs = hamiltonian([0.5, 0.1], [named_obs("PauliZ", [0]), named_obs("PauliX", [1])])
>>> get_obs_name(obs)
"Hamiltonian: { 'coeffs' : [0.5, 0.1], 'observables' : [PauliZ[0], PauliX[1]]}"
>>> get_wires(obs)
[0, 1]
"""
from dataclasses import dataclass
from functools import singledispatch
from typing import Tuple, Union

import numpy as np

from mgpu_adjoint.exceptions import ConfigurationError


@dataclass(frozen=True)
class NamedObs:
    """Observable given by the name of a gate, such as ``PauliZ``.

    Args:
        name (str): name of the gate
        wires (tuple[int]): wires the observable acts on
        params (tuple[float]): gate parameters, empty for the Pauli observables
    """

    name: str
    wires: Tuple[int, ...]
    params: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "wires", tuple(int(w) for w in self.wires))
        object.__setattr__(self, "params", tuple(self.params))


@dataclass(frozen=True)
class HermitianObs:
    """Observable given by a dense Hermitian matrix.

    Args:
        data (tuple[complex]): row-major matrix entries, :math:`4^k` of them for ``k`` wires
        wires (tuple[int]): wires the observable acts on

    Raises:
        ConfigurationError: if the number of entries does not match the wires
    """

    data: Tuple[complex, ...]
    wires: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "data", tuple(complex(m) for m in np.ravel(self.data)))
        object.__setattr__(self, "wires", tuple(int(w) for w in self.wires))

        if len(self.data) != 4 ** len(self.wires):
            raise ConfigurationError(
                f"A Hermitian observable on {len(self.wires)} wires requires "
                f"{4 ** len(self.wires)} matrix entries, got {len(self.data)}."
            )

    @property
    def matrix(self):
        """array[complex]: square copy of the matrix"""
        dim = 2 ** len(self.wires)
        return np.array(self.data, dtype=np.complex128).reshape(dim, dim)


@dataclass(frozen=True)
class TensorProdObs:
    """Tensor product of observables acting on disjoint wires.

    Args:
        obs (tuple[Observable]): the factors, applied in order

    Raises:
        ConfigurationError: if two factors share a wire
    """

    obs: tuple

    def __post_init__(self):
        object.__setattr__(self, "obs", tuple(self.obs))

        seen = set()
        for ob in self.obs:
            wires = set(get_wires(ob))
            if seen & wires:
                raise ConfigurationError("All wires in observables must be disjoint.")
            seen |= wires

    def __len__(self):
        return len(self.obs)


@dataclass(frozen=True)
class Hamiltonian:
    """Linear combination of observables.

    Args:
        coeffs (tuple[float]): real coefficients
        obs (tuple[Observable]): the terms

    Raises:
        ConfigurationError: if there is not exactly one coefficient per term
    """

    coeffs: Tuple[float, ...]
    obs: tuple

    def __post_init__(self):
        object.__setattr__(self, "coeffs", tuple(float(c) for c in self.coeffs))
        object.__setattr__(self, "obs", tuple(self.obs))

        if len(self.coeffs) != len(self.obs):
            raise ConfigurationError(
                f"Could not create Hamiltonian from {len(self.coeffs)} coefficients "
                f"and {len(self.obs)} observables."
            )


Observable = Union[NamedObs, HermitianObs, TensorProdObs, Hamiltonian]


def named_obs(name, wires, params=()):
    """Create a :class:`NamedObs`."""
    return NamedObs(name, tuple(wires), tuple(params))


def hermitian_obs(matrix, wires):
    """Create a :class:`HermitianObs` from a square or flattened matrix."""
    return HermitianObs(tuple(np.ravel(matrix)), tuple(wires))


def tensor_prod_obs(*obs):
    """Create a :class:`TensorProdObs` from its factors."""
    return TensorProdObs(obs)


def hamiltonian(coeffs, obs):
    """Create a :class:`Hamiltonian` from coefficients and terms."""
    return Hamiltonian(tuple(coeffs), tuple(obs))


# =============================================================================
# Wires
# =============================================================================


@singledispatch
def get_wires(obs):
    """Return the wires an observable acts on.

    Composite observables report the sorted union of the wires of their parts.

    Args:
        obs (Observable): the observable

    Returns:
        list[int]: the wires
    """
    raise TypeError(f"Unsupported observable type {type(obs).__name__}")


@get_wires.register(NamedObs)
@get_wires.register(HermitianObs)
def _(obs):
    return list(obs.wires)


@get_wires.register(TensorProdObs)
@get_wires.register(Hamiltonian)
def _(obs):
    return sorted({w for ob in obs.obs for w in get_wires(ob)})


# =============================================================================
# Names
# =============================================================================


@singledispatch
def get_obs_name(obs):
    """Return the canonical name of an observable, e.g. ``"PauliZ[1]"``.

    Args:
        obs (Observable): the observable

    Returns:
        str: the name
    """
    raise TypeError(f"Unsupported observable type {type(obs).__name__}")


@get_obs_name.register
def _(obs: NamedObs):
    return f"{obs.name}[{', '.join(str(w) for w in obs.wires)}]"


@get_obs_name.register
def _(obs: HermitianObs):
    return "Hermitian"


@get_obs_name.register
def _(obs: TensorProdObs):
    return " @ ".join(get_obs_name(ob) for ob in obs.obs)


@get_obs_name.register
def _(obs: Hamiltonian):
    coeffs = ", ".join(str(c) for c in obs.coeffs)
    terms = ", ".join(get_obs_name(ob) for ob in obs.obs)
    return f"Hamiltonian: {{ 'coeffs' : [{coeffs}], 'observables' : [{terms}]}}"


# =============================================================================
# Application to a state
# =============================================================================


@singledispatch
def apply_in_place(obs, sv):
    """Replace the state ``sv`` with ``obs`` applied to it.

    Args:
        obs (Observable): the observable
        sv (StateVector): the state, overwritten with the result
    """
    raise TypeError(f"Unsupported observable type {type(obs).__name__}")


@apply_in_place.register
def _(obs: NamedObs, sv):
    sv.apply_operation(obs.name, obs.wires, False, obs.params)


@apply_in_place.register
def _(obs: HermitianObs, sv):
    sv.apply_matrix(obs.data, obs.wires)


@apply_in_place.register
def _(obs: TensorProdObs, sv):
    for ob in obs.obs:
        apply_in_place(ob, sv)


@apply_in_place.register
def _(obs: Hamiltonian, sv):
    result = sv.zeros_like()
    for coeff, ob in zip(obs.coeffs, obs.obs):
        term = sv.copy()
        apply_in_place(ob, term)
        result.scale_and_add(coeff, term)
    sv.update_data(result)


def expval(obs, sv):
    r"""Expectation value :math:`\langle\psi|O|\psi\rangle` of an observable.

    The state is left untouched.

    Args:
        obs (Observable): the observable
        sv (StateVector): the normalized state :math:`|\psi\rangle`

    Returns:
        float: the expectation value
    """
    applied = sv.copy()
    apply_in_place(obs, applied)
    return sv.inner_product(applied).real
