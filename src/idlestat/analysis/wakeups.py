"""
Attribution of wake-ups to interrupt sources.
"""

import logging
from typing import Optional

from ..models.states import Residency, WakeupIrq
from ..topology.model import Cpu

logger = logging.getLogger(__name__)


def store_irq(cpu: Cpu, irq_id: int, name: str,
              time: Optional[float] = None) -> Optional[WakeupIrq]:
    """
    Charge the last wake-up of ``cpu`` to an interrupt source.

    Only the first interrupt after an idle interval is charged; later ones
    are ignored until the CPU enters idle again. The early and late counters
    follow the classification of the interval that ended last.

    Args:
        cpu: CPU that handled the interrupt
        irq_id: Interrupt number, -1 for an IPI
        name: Handler name or IPI reason
        time: Event timestamp, only used for logging

    Returns:
        The charged entry, or None if the wake-up was already attributed
    """
    track = cpu.cstates
    if track.wakeirq is not None:
        return None

    entry = cpu.wakeups.get_or_create(irq_id, name)
    entry.count += 1
    if track.actual_residency is Residency.TOO_SHORT:
        entry.early_triggers += 1
    elif track.actual_residency is Residency.TOO_LONG:
        entry.late_triggers += 1

    track.wakeirq = entry
    if time is not None:
        logger.debug(f"{cpu.label} woken by {entry.label} {irq_id} {name} at {time:.6f}")
    return entry
