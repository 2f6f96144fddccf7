# Copyright (C) 2021. Huawei Technologies Co., Ltd. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

import dataclasses
import os
from typing import Any


def laneroutes_local_user_dir() -> str:
    """Retrieves the laneroutes per-user directory, creating it if needed.

    Returns:
        str: The path to the local user directory (`~/.laneroutes`).
    """
    path = os.path.join(os.path.expanduser("~"), ".laneroutes")
    os.makedirs(path, exist_ok=True)
    return path


def laneroutes_global_user_dir() -> str:
    """Retrieves the laneroutes system-wide configuration directory.

    Returns:
        str: The path to the global directory (`/etc/laneroutes`).
    """
    return os.path.join(os.sep, "etc", "laneroutes")


# https://stackoverflow.com/a/2166841
def isnamedtupleinstance(x):
    """Check to see if an object is a named tuple."""
    t = type(x)
    b = t.__bases__
    if len(b) != 1 or b[0] != tuple:
        return False
    f = getattr(t, "_fields", None)
    if not isinstance(f, tuple):
        return False
    return all(type(n) == str for n in f)


def replace(obj: Any, **kwargs):
    """Replace dataclasses and named tuples with the same interface."""
    if isnamedtupleinstance(obj):
        return obj._replace(**kwargs)
    elif dataclasses.is_dataclass(obj):
        return dataclasses.replace(obj, **kwargs)

    raise ValueError("Must be a namedtuple or dataclass.")
