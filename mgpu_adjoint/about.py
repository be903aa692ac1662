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
This module contains the :func:`about` function, which prints the details of
the mgpu_adjoint installation: platform, versions of the array stack, the
loaded configuration file and the number of devices the default pool would use.
"""
import os
import platform
import sys
from importlib import metadata

import numpy
import scipy

from mgpu_adjoint.configuration import default_config
from mgpu_adjoint.devices.device_pool import NUM_DEVICES_ENV


def _package_rows():
    try:
        meta = metadata.metadata("mgpu-adjoint")
    except metadata.PackageNotFoundError:
        return [("Name", "mgpu-adjoint (not installed)")]
    return [(field, meta.get(field, "")) for field in ("Name", "Version", "Summary")]


def about():
    """Print information about the mgpu_adjoint installation.

    **Example**

    >>> mgpu_adjoint.about()
    Name:                    mgpu-adjoint
    Version:                 0.3.0.dev0
    ...
    Devices:                 1
    """
    location = os.path.dirname(os.path.abspath(sys.modules["mgpu_adjoint"].__file__))
    num_devices = os.environ.get(NUM_DEVICES_ENV) or default_config.get("devices.num_devices", 1)

    rows = _package_rows() + [
        ("Location", location),
        ("Platform info", platform.platform(aliased=True)),
        ("Python version", platform.python_version()),
        ("Numpy version", numpy.__version__),
        ("Scipy version", scipy.__version__),
        ("autoray version", metadata.version("autoray")),
        ("Configuration file", default_config.path),
        ("Devices", num_devices),
    ]
    for label, value in rows:
        print(f"{label + ':':<25}{value}")


if __name__ == "__main__":
    about()
