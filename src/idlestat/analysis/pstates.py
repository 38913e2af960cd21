"""
P-state machine: frequency dwell accounting on a track.

CPU tracks are driven by frequency-change events and by idle transitions.
Core and cluster tracks are driven by the composite frequency of their
members, where 0 means no member is running at a known frequency.
"""

import logging

from ..models.states import PStateTrack
from ..validation import AllocationFailure
from .cstates import USEC_PER_SEC

logger = logging.getLogger(__name__)


def alloc_pstate(track: PStateTrack, freq: int) -> int:
    """
    Return the slot index for ``freq``, inserting an empty slot if needed.

    Raises:
        AllocationFailure: If the slot table cannot grow
    """
    index = track.find(freq)
    if index != -1:
        return index
    try:
        return track.insert_slot(freq)
    except MemoryError as e:
        raise AllocationFailure(f"cannot allocate P-state slot for {freq} Hz") from e


def open_current_pstate(track: PStateTrack, time: float) -> None:
    track.time_enter = time


def close_current_pstate(track: PStateTrack, time: float) -> None:
    """Fold the open dwell of the selected slot, ignoring non-positive ones."""
    elapsed = (time - track.time_enter) * USEC_PER_SEC
    if elapsed <= 0:
        return
    track.states[track.current].add_sample(elapsed)


def cpu_change_pstate(track: PStateTrack, time: float, freq: int) -> bool:
    """
    Apply a raw CPU frequency change.

    While the CPU is idle only the selected slot changes; its dwell opens
    when the CPU resumes running.

    Returns:
        True if the selected slot changed
    """
    index = alloc_pstate(track, freq)
    if index == track.current:
        return False

    if track.idle:
        track.current = index
        return True

    if track.current != -1:
        close_current_pstate(track, time)
    track.current = index
    open_current_pstate(track, time)
    return True


def record_group_freq(track: PStateTrack, time: float, freq: int) -> bool:
    """
    Apply a composite frequency to a core or cluster track.

    A frequency of 0 closes any open dwell and leaves the track idle with no
    selected slot.

    Returns:
        True if the selected slot changed
    """
    if freq == 0:
        if track.current == -1:
            track.idle = True
            return False
        if not track.idle:
            close_current_pstate(track, time)
        track.current = -1
        track.idle = True
        return True

    index = alloc_pstate(track, freq)
    track.idle = False
    if index == track.current:
        return False

    if track.current != -1:
        close_current_pstate(track, time)
    track.current = index
    open_current_pstate(track, time)
    return True


def enter_idle(track: PStateTrack, time: float) -> None:
    """Stop accruing dwell time because the owner went idle."""
    if track.idle:
        return
    if track.current != -1:
        close_current_pstate(track, time)
    track.idle = True


def exit_idle(track: PStateTrack, time: float) -> None:
    """Resume accruing dwell time on the previously selected slot."""
    if not track.idle:
        return
    track.idle = False
    if track.current != -1:
        open_current_pstate(track, time)
