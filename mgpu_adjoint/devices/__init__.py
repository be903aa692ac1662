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
This subpackage contains the device layer: device identities, the device pool,
the per-device gate cache and the state-vector backend.
"""
from .dev_tag import DevTag
from .device_pool import DevicePool, get_device_pool
from .gate_cache import GateCache
from .statevector import STATE_PREP_OPS, StateVector
