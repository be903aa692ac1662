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
Device identity attached to every state-vector buffer.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class DevTag:
    """Identifies the device and stream a buffer lives on.

    Args:
        device_id (int): index of the device in the device pool
        stream_id (int): stream on that device used to order kernels
    """

    device_id: int = 0
    stream_id: int = 0

    def __str__(self):
        return f"device {self.device_id} (stream {self.stream_id})"

    def refresh(self):
        """Make this device current for the calling thread.

        Host-backed buffers need no device context, so this is a no-op here. Array
        libraries that bind kernels to a current device override it.
        """
