"""Runtime façade for host applications.

Purpose
-------
Expose :class:`UdpOutput`, the lifecycle surface a host runtime uses
(construct, ``write``, ``write_batch``, ``stop``, ``is_running``), while the
queue, worker, transport, and reconnect wiring stay behind it.
"""

from __future__ import annotations

from ._composition import OutputComponents, build_components
from ._output import UdpOutput

__all__ = ["OutputComponents", "UdpOutput", "build_components"]
