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
This module contains the :class:`DevicePool`, the process-wide registry of
devices that shard workers acquire and release.
"""
import contextlib
import logging
import os
import threading

from mgpu_adjoint.configuration import default_config
from mgpu_adjoint.exceptions import InvalidArgumentError, ResourceExhaustionError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

#: environment variable overriding the number of devices in the default pool
NUM_DEVICES_ENV = "MGPU_ADJOINT_NUM_DEVICES"


class DevicePool:
    """A registry of device ids with availability flags.

    Acquisition is blocking: a worker asking for a device waits until another
    worker releases one. The lowest free device id is always handed out first.

    Args:
        num_devices (int): number of devices in the pool. If ``None``, the value is
            read from the ``MGPU_ADJOINT_NUM_DEVICES`` environment variable, then from
            the ``devices.num_devices`` configuration key, and defaults to 1.

    **Example**

    >>> pool = DevicePool(2)
    >>> with pool.device() as device_id:
    ...     print(device_id, pool.get_active_devices())
    0 [0]
    >>> pool.get_active_devices()
    []
    """

    def __init__(self, num_devices=None):
        if num_devices is None:
            num_devices = _default_num_devices()

        if num_devices < 1:
            raise InvalidArgumentError(
                f"A device pool requires at least one device, got {num_devices}."
            )

        self._available = {device_id: True for device_id in range(num_devices)}
        self._cv = threading.Condition()

    def __repr__(self):
        total, active = self.get_total_devices(), self.get_active_devices()
        return f"<DevicePool: devices={total}, active={active}>"

    def get_total_devices(self):
        """Number of devices managed by the pool."""
        return len(self._available)

    def get_active_devices(self):
        """Ids of the devices currently acquired by a worker."""
        with self._cv:
            return [device_id for device_id, free in self._available.items() if not free]

    def is_active(self, device_id):
        """Whether the given device is currently acquired."""
        with self._cv:
            return not self._available[device_id]

    def acquire_device(self, timeout=None):
        """Acquire the lowest free device, blocking until one is released.

        Args:
            timeout (float): maximum number of seconds to wait. ``None`` waits forever.

        Returns:
            int: the acquired device id

        Raises:
            ResourceExhaustionError: if no device became free within ``timeout``
        """
        with self._cv:
            if not self._cv.wait_for(self._has_free_device, timeout=timeout):
                raise ResourceExhaustionError(
                    f"No device became available within {timeout} seconds."
                )

            device_id = next(d for d, free in self._available.items() if free)
            self._available[device_id] = False

        logger.debug("Acquired device %s", device_id)
        return device_id

    def release_device(self, device_id):
        """Return a device to the pool and wake up one waiting worker.

        Args:
            device_id (int): id returned by :meth:`acquire_device`

        Raises:
            InvalidArgumentError: if the id is unknown or the device is not acquired
        """
        with self._cv:
            if self._available.get(device_id, True):
                raise InvalidArgumentError(f"Device {device_id} is not acquired from this pool.")

            self._available[device_id] = True
            self._cv.notify()

        logger.debug("Released device %s", device_id)

    @contextlib.contextmanager
    def device(self, timeout=None):
        """Context manager acquiring a device and releasing it on every exit path.

        Args:
            timeout (float): maximum number of seconds to wait for a device

        Yields:
            int: the acquired device id
        """
        device_id = self.acquire_device(timeout=timeout)
        try:
            yield device_id
        finally:
            self.release_device(device_id)

    def _has_free_device(self):
        return any(self._available.values())


def _default_num_devices():
    env_value = os.environ.get(NUM_DEVICES_ENV, "")
    if env_value:
        return int(env_value)
    return int(default_config.get("devices.num_devices", 1))


_default_pool = None
_default_pool_lock = threading.Lock()


def get_device_pool():
    """Return the process-wide device pool, creating it on first use.

    Returns:
        DevicePool: the shared device pool
    """
    global _default_pool  # pylint: disable=global-statement

    with _default_pool_lock:
        if _default_pool is None:
            _default_pool = DevicePool()
            logger.debug("Created process-wide %r", _default_pool)
        return _default_pool
