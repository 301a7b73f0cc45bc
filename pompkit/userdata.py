"""Named auxiliary data made available to model functions."""

from __future__ import annotations

import numpy as np


class UserData:
    """A read-only collection of named user-supplied values."""

    def __init__(self, elements=None, /, **kwargs):
        self._elements = dict(elements or {})
        self._elements.update(kwargs)

    def __contains__(self, name):
        return self._elements.get(name) is not None

    def __iter__(self):
        return iter(self._elements)

    def __len__(self):
        return len(self._elements)

    def get(self, name):
        """Return the element called ``name``; raise KeyError if it is absent."""
        value = self._elements.get(name)
        if value is None:
            raise KeyError(f"no user-data element '{name}' is found.")
        return value

    def get_int(self, name):
        """Return the element called ``name`` as an integer array."""
        array = np.asarray(self.get(name))
        if array.dtype.kind not in "iu":
            raise TypeError(f"user-data element '{name}' is not an integer.")
        return np.atleast_1d(array)

    def get_double(self, name):
        """Return the element called ``name`` as a floating-point array."""
        array = np.asarray(self.get(name))
        if array.dtype.kind != "f":
            raise TypeError(f"user-data element '{name}' is not a numeric vector.")
        return np.atleast_1d(array)