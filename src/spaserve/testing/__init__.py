"""Test utilities for spaserve handlers.

Drives an ASGI app in-process and returns the same ``Response`` type the
handler produces::

    from spaserve.testing import TestClient
"""

from spaserve.testing.client import TestClient

__all__ = ["TestClient"]
