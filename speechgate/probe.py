"""
Per-buffer gate handler shared by capture sources that hand over mappable buffers.
Nothing raised while gating one block is allowed to reach the delivery thread.
"""

from __future__ import annotations

import logging

from .gate import GateController, VolumePropertyWriteFailure

logger = logging.getLogger(__name__)


def gate_buffer(buffer, controller: GateController, read_flags) -> None:
    """
    Map buffer read-only, gate its PCM16 bytes, and always unmap.
    A failed map is passed on as an unavailable block (treated as silence).
    """
    if buffer is None:
        return
    ok, map_info = buffer.map(read_flags)
    try:
        controller.process_bytes(map_info.data if ok else None)
    except VolumePropertyWriteFailure as e:
        logger.error("%s", e)
    finally:
        if ok:
            buffer.unmap(map_info)
