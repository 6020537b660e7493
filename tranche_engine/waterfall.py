from __future__ import annotations

import logging
from typing import List, Sequence

from .first_loss_cover import cover_loss, recover_loss
from .fixed_point import require_amount
from .models import (
    FirstLossCoverState,
    LossDistribution,
    RecoveryDistribution,
    TrancheAssets,
    TrancheLosses,
)

logger = logging.getLogger(__name__)


def distribute_loss(
    loss: int,
    assets: TrancheAssets,
    covers: Sequence[FirstLossCoverState],
) -> LossDistribution:
    """
    Most subordinate capital absorbs first:
      1) First loss covers, in stack order (index 0 first)
      2) Junior tranche
      3) Senior tranche
    Whatever is left after the senior tranche is uncovered loss. It is
    reported, never absorbed or clamped away.
    """
    require_amount(loss, "loss")
    remaining = loss

    # 1) First loss covers
    new_covers: List[FirstLossCoverState] = []
    cover_losses: List[int] = []
    for cover in covers:
        new_cover, covered, remaining = cover_loss(cover, remaining)
        new_covers.append(new_cover)
        cover_losses.append(covered)

    # 2) Junior
    junior_loss = min(remaining, assets.junior)
    remaining -= junior_loss

    # 3) Senior
    senior_loss = min(remaining, assets.senior)
    remaining -= senior_loss

    if remaining > 0:
        logger.critical(
            "Uncovered loss of %d: loss %d not absorbed after covers, junior and senior (cover assets left: %s)",
            remaining, loss, [c.asset for c in new_covers],
        )
    logger.debug(
        "Loss %d -> covers %s, junior %d, senior %d, uncovered %d",
        loss, cover_losses, junior_loss, senior_loss, remaining,
    )

    return LossDistribution(
        new_assets=TrancheAssets(senior=assets.senior - senior_loss, junior=assets.junior - junior_loss),
        losses=TrancheLosses(senior_loss=senior_loss, junior_loss=junior_loss),
        cover_losses=tuple(cover_losses),
        covers=tuple(new_covers),
        uncovered_loss=remaining,
    )


def distribute_recovery(
    recovery: int,
    assets: TrancheAssets,
    losses: TrancheLosses,
    covers: Sequence[FirstLossCoverState],
) -> RecoveryDistribution:
    """
    Exact reverse of the loss order, so the last to lose is the first repaid:
      1) Senior tranche, up to its outstanding loss
      2) Junior tranche, up to its outstanding loss
      3) First loss covers in reverse stack order, up to each one's covered loss
    Any recovery left after every outstanding loss is repaid comes back to the
    caller as remaining_recovery.
    """
    require_amount(recovery, "recovery")
    remaining = recovery

    # 1) Senior
    senior_recovery = min(remaining, losses.senior_loss)
    remaining -= senior_recovery

    # 2) Junior
    junior_recovery = min(remaining, losses.junior_loss)
    remaining -= junior_recovery

    # 3) First loss covers, most senior cover first
    new_covers: List[FirstLossCoverState] = list(covers)
    cover_recoveries: List[int] = [0] * len(covers)
    for i in reversed(range(len(covers))):
        if remaining == 0:
            break
        new_covers[i], cover_recoveries[i], remaining = recover_loss(covers[i], remaining)

    if remaining > 0:
        logger.warning("Recovery exceeds outstanding losses by %d", remaining)
    logger.debug(
        "Recovery %d -> senior %d, junior %d, covers %s, remaining %d",
        recovery, senior_recovery, junior_recovery, cover_recoveries, remaining,
    )

    return RecoveryDistribution(
        remaining_recovery=remaining,
        new_assets=TrancheAssets(
            senior=assets.senior + senior_recovery,
            junior=assets.junior + junior_recovery,
        ),
        new_losses=TrancheLosses(
            senior_loss=losses.senior_loss - senior_recovery,
            junior_loss=losses.junior_loss - junior_recovery,
        ),
        senior_recovery=senior_recovery,
        junior_recovery=junior_recovery,
        cover_recoveries=tuple(cover_recoveries),
        covers=tuple(new_covers),
    )
