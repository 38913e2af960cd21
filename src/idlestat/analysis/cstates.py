"""
C-state machine: opening and closing idle intervals on a track.
"""

import logging

from ..models.states import MAX_CSTATE, CStateTrack, Residency
from ..validation import StructuralInputError

logger = logging.getLogger(__name__)

USEC_PER_SEC = 1_000_000


def classify_residency(track: CStateTrack, depth: int, elapsed: float) -> Residency:
    """
    Compare a closed interval at ``depth`` with the break-even residencies.

    An interval shorter than its own target is too short. One that reaches
    the target of the next deeper state (when that state has been used on
    this track and has a known target) is too long.
    """
    if elapsed < track.states[depth].target_residency:
        return Residency.TOO_SHORT
    next_depth = depth + 1
    if next_depth <= track.cstate_max:
        next_target = track.target_of(next_depth)
        if next_target > 0 and elapsed >= next_target:
            return Residency.TOO_LONG
    return Residency.AS_EXPECTED


def open_cstate(track: CStateTrack, time: float, depth: int) -> None:
    track.current_cstate = depth
    track.begin_time = time
    track.wakeirq = None
    track.cstate_max = max(track.cstate_max, depth)


def close_cstate(track: CStateTrack, time: float, verbose: int = 0) -> None:
    """
    Close the open interval at ``time`` and fold it into the statistics.

    Non-positive intervals terminate the idle state but are not recorded.
    """
    depth = track.current_cstate
    elapsed = (time - track.begin_time) * USEC_PER_SEC
    track.current_cstate = -1

    if elapsed <= 0:
        track.actual_residency = Residency.AS_EXPECTED
        if verbose:
            logger.debug(f"Discarding {elapsed:.3f}us interval at depth {depth} ending at {time:.6f}")
        return

    state = track.states[depth]
    state.add_sample(elapsed)
    residency = classify_residency(track, depth, elapsed)
    if residency is Residency.TOO_SHORT:
        state.early_wakings += 1
    elif residency is Residency.TOO_LONG:
        state.late_wakings += 1
    track.actual_residency = residency


def record_cstate_event(track: CStateTrack, time: float, new_depth: int,
                        verbose: int = 0) -> bool:
    """
    Move a track to ``new_depth`` (-1 meaning running) at ``time``.

    Args:
        track: C-state track of a CPU, core or cluster
        time: Event timestamp in seconds
        new_depth: Target idle depth, -1 to leave idle
        verbose: Log discarded intervals when non-zero

    Returns:
        True if the track changed state, False for a no-op

    Raises:
        StructuralInputError: If ``new_depth`` is outside the tracked range
    """
    if new_depth < -1 or new_depth >= MAX_CSTATE:
        raise StructuralInputError(f"idle depth {new_depth} out of range", depth=new_depth)

    if new_depth == track.current_cstate:
        return False

    if track.current_cstate != -1:
        close_cstate(track, time, verbose)

    if new_depth != -1:
        open_cstate(track, time, new_depth)

    return True
