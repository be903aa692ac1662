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
Logging support for mgpu_adjoint, built on the standard :mod:`logging` module.

Call :func:`enable_logging` to see DEBUG records from the engine, the device
pool and the gate caches.
"""
from .configuration import TRACE, config_path, enable_logging
from .decorators import debug_logger, debug_logger_init
from .filter import DebugOnlyFilter, LocalProcessFilter
