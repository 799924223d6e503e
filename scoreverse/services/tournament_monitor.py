"""
Tournament completion detection.

Runs once, right after a match has been written. The leaderboard for the
match's game and space is recomputed including the new match, and every active
tournament for that game and space whose target has been reached is completed
with the current leader as winner. When several players cross the target in
the same update, ranking order decides: the leader takes the win.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from scoreverse.core.exceptions import StoreWriteError
from scoreverse.core.scope import in_scope, scope_for
from scoreverse.models.match_model import MatchModel
from scoreverse.models.player_model import PlayerModel
from scoreverse.models.stats_model import ScoreData
from scoreverse.models.tournament_model import TournamentModel, TournamentStatus
from scoreverse.services.scoring_service import calculate_scores, filter_matches

logger = logging.getLogger(__name__)


def find_tournament_winner(tournament: TournamentModel, scores: List[ScoreData]) -> Optional[ScoreData]:
    # scores are ranked, so the first qualifier is the leader or nobody qualifies
    return next((score for score in scores if score.total_points >= tournament.target_points), None)


def detect_completed_tournaments(
    new_match: MatchModel,
    matches: Iterable[MatchModel],
    tournaments: Iterable[TournamentModel],
    players: Iterable[PlayerModel],
    now: Optional[datetime] = None,
) -> List[TournamentModel]:
    """Completed copies of the tournaments won by ``new_match``. Does not persist anything."""
    scope = scope_for(new_match.space_id)
    scoped = filter_matches(matches, scope, new_match.game_id)
    if all(match.id != new_match.id for match in scoped):
        scoped.append(new_match)
    scores = calculate_scores(scoped, players)

    completed_at = now or datetime.now(timezone.utc)
    completed = []
    for tournament in tournaments:
        if tournament.game_id != new_match.game_id or not in_scope(tournament.space_id, scope):
            continue
        if tournament.status != TournamentStatus.ACTIVE:
            continue
        winner = find_tournament_winner(tournament, scores)
        if winner is None:
            continue
        completed.append(tournament.model_copy(update={
            "status": TournamentStatus.COMPLETED.value,
            "winner_player_id": winner.player_id,
            "date_completed": completed_at,
        }))
    return completed


def run_tournament_monitor(
    new_match: MatchModel,
    matches: Iterable[MatchModel],
    tournaments: Iterable[TournamentModel],
    players: Iterable[PlayerModel],
    persist: Callable[[TournamentModel], None],
    notify: Optional[Callable[[TournamentModel], None]] = None,
    now: Optional[datetime] = None,
) -> List[TournamentModel]:
    """
    Detects and persists tournament completions for a freshly recorded match.

    Each completion is written on its own. A failed write leaves that tournament
    active and is logged, never retried; the match itself stays recorded.
    Returns the tournaments that were completed successfully.
    """
    persisted = []
    for tournament in detect_completed_tournaments(new_match, matches, tournaments, players, now=now):
        try:
            persist(tournament)
        except StoreWriteError as e:
            logger.error("Could not mark tournament %s as completed: %s", tournament.id, e)
            continue
        logger.info(
            "Tournament %s completed, winner %s (target %s)",
            tournament.id, tournament.winner_player_id, tournament.target_points,
        )
        persisted.append(tournament)
        if notify is not None:
            notify(tournament)
    return persisted
