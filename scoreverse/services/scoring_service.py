"""Leaderboard aggregation.

Scores are recomputed from scratch from the match list on every read. Nothing
here is cached or incrementally maintained, so the result only depends on the
records passed in.
"""
from typing import Dict, Iterable, List, Optional

from scoreverse.core.scope import Scope, in_scope
from scoreverse.models.match_model import MatchModel
from scoreverse.models.player_model import PlayerModel
from scoreverse.models.stats_model import ScoreData, UNKNOWN_PLAYER_NAME
from scoreverse.models.tournament_model import TournamentModel


def ranking_key(score: ScoreData):
    """Points, then wins, then fewer games played, then name and id so equal rows keep a fixed order."""
    return (-score.total_points, -score.wins, score.games_played, score.player_name.lower(), score.player_id)


def calculate_scores(matches: Iterable[MatchModel], players: Iterable[PlayerModel]) -> List[ScoreData]:
    """
    Builds a ranked leaderboard from matches already filtered to the wanted scope.

    Every participant gets one game played per match. Each points award is added
    to its player's total, including negative handicap adjustments. Wins are only
    credited to ids that actually took part in the match. Players from the roster
    with no activity in ``matches`` are left out.
    """
    roster: Dict[str, PlayerModel] = {player.id: player for player in players}
    totals: Dict[str, ScoreData] = {}

    def entry(player_id: str) -> ScoreData:
        if player_id not in totals:
            player = roster.get(player_id)
            totals[player_id] = ScoreData(
                player_id=player_id,
                player_name=player.name if player else UNKNOWN_PLAYER_NAME,
                avatar_url=player.avatar_url if player else None,
            )
        return totals[player_id]

    for match in matches or []:
        participants = set(match.player_ids)
        for player_id in match.player_ids:
            entry(player_id).games_played += 1
        for award in match.points_awarded:
            entry(award.player_id).total_points += award.points
        for winner_id in match.winner_ids:
            if winner_id in participants:
                entry(winner_id).wins += 1

    active = [score for score in totals.values() if score.games_played > 0 or score.total_points != 0]
    return sorted(active, key=ranking_key)


def filter_matches(matches: Iterable[MatchModel], scope: Scope, game_id: Optional[str] = None) -> List[MatchModel]:
    return [
        match for match in matches
        if in_scope(match.space_id, scope) and (game_id is None or match.game_id == game_id)
    ]


def filter_tournaments(tournaments: Iterable[TournamentModel], scope: Scope, game_id: Optional[str] = None) -> List[TournamentModel]:
    return [
        tournament for tournament in tournaments
        if in_scope(tournament.space_id, scope) and (game_id is None or tournament.game_id == game_id)
    ]


def scoped_leaderboard(matches: Iterable[MatchModel], players: Iterable[PlayerModel], scope: Scope, game_id: Optional[str] = None) -> List[ScoreData]:
    return calculate_scores(filter_matches(matches, scope, game_id), players)
