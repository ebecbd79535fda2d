"""Value transfer between the two teams of a settled fixture: pure integer math."""

from dataclasses import dataclass

from src.mx_common.cents import bps_of
from src.mx_common.enums import MatchResult


@dataclass(frozen=True)
class TransferPlan:
    result: MatchResult
    winner_team_id: int | None
    loser_team_id: int | None
    amount: int               # cents moved loser -> winner; 0 on a draw

    def delta_for(self, team_id: int) -> int:
        if team_id == self.winner_team_id:
            return self.amount
        if team_id == self.loser_team_id:
            return -self.amount
        return 0


def compute_transfer(
    result: MatchResult,
    home_team_id: int,
    away_team_id: int,
    snapshot_home_cap: int,
    snapshot_away_cap: int,
    transfer_bps: int,
) -> TransferPlan:
    """Winner gains transfer_bps of the loser's pre-match valuation; loser loses the same.

    Raises ValueError for a PENDING result.
    """
    if result == MatchResult.HOME_WIN:
        return TransferPlan(
            result=result,
            winner_team_id=home_team_id,
            loser_team_id=away_team_id,
            amount=bps_of(snapshot_away_cap, transfer_bps),
        )
    if result == MatchResult.AWAY_WIN:
        return TransferPlan(
            result=result,
            winner_team_id=away_team_id,
            loser_team_id=home_team_id,
            amount=bps_of(snapshot_home_cap, transfer_bps),
        )
    if result == MatchResult.DRAW:
        return TransferPlan(result=result, winner_team_id=None, loser_team_id=None, amount=0)
    raise ValueError(f"Cannot compute a transfer for result {result}")
