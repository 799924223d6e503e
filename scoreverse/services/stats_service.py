from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from scoreverse.models.game_model import GameModel
from scoreverse.models.match_model import MatchModel
from scoreverse.models.player_model import PlayerModel
from scoreverse.models.stats_model import (
    CurrentStreak,
    PlayerGameStats,
    PlayerStats,
    StreakType,
    TrophyShelf,
)
from scoreverse.models.tournament_model import TournamentModel, TournamentStatus


def calculate_player_stats(
    player_id: str,
    players: Iterable[PlayerModel],
    matches: Iterable[MatchModel],
    games: Iterable[GameModel],
) -> Optional[PlayerStats]:
    """
    Lifetime statistics for one player across every space.

    Returns None when the player is not in the roster. A player with no matches
    gets zeroed stats and a current streak of ``W0``.
    """
    player = next((p for p in players if p.id == player_id), None)
    if player is None:
        return None

    # sorted() is stable, so matches sharing a timestamp keep their input order
    history = sorted((m for m in matches if player_id in m.player_ids), key=lambda m: m.date)

    wins = 0
    total_points = 0
    win_run = loss_run = 0
    longest_win = longest_loss = 0
    per_game: Dict[str, List[int]] = OrderedDict() # game_id -> [wins, played]

    for match in history:
        won = player_id in match.winner_ids
        if won:
            wins += 1
            win_run += 1
            loss_run = 0
            longest_win = max(longest_win, win_run)
        else:
            loss_run += 1
            win_run = 0
            longest_loss = max(longest_loss, loss_run)

        total_points += sum(a.points for a in match.points_awarded if a.player_id == player_id)

        record = per_game.setdefault(match.game_id, [0, 0])
        record[0] += 1 if won else 0
        record[1] += 1

    total_games = len(history)
    if history:
        last_won = player_id in history[-1].winner_ids
        current_streak = CurrentStreak(
            type=StreakType.WIN if last_won else StreakType.LOSS,
            count=win_run if last_won else loss_run,
        )
    else:
        current_streak = CurrentStreak(type=StreakType.WIN, count=0)

    return PlayerStats(
        player=player,
        total_games=total_games,
        total_wins=wins,
        total_losses=total_games - wins,
        win_rate=wins / total_games if total_games else 0.0,
        current_streak=current_streak,
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        total_points=total_points,
        average_points_per_match=total_points / total_games if total_games else 0.0,
        game_stats=_game_breakdown(per_game, games),
    )


def _game_breakdown(per_game: Dict[str, List[int]], games: Iterable[GameModel]) -> List[PlayerGameStats]:
    games_by_id = {game.id: game for game in games}
    breakdown = []
    for game_id, (wins, played) in per_game.items():
        game = games_by_id.get(game_id)
        if game is None:
            continue # deleted games drop out of the breakdown
        breakdown.append(PlayerGameStats(
            game=game,
            wins=wins,
            losses=played - wins,
            games_played=played,
            win_rate=wins / played,
        ))
    breakdown.sort(key=lambda s: (-s.games_played, s.game.name.lower()))
    return breakdown


def trophy_room(players: Iterable[PlayerModel], tournaments: Iterable[TournamentModel]) -> List[TrophyShelf]:
    """Completed tournaments grouped by winner, most decorated player first."""
    roster = {player.id: player for player in players}
    shelves: Dict[str, TrophyShelf] = {}
    for tournament in tournaments:
        if tournament.status != TournamentStatus.COMPLETED or not tournament.winner_player_id:
            continue
        player = roster.get(tournament.winner_player_id)
        if player is None:
            continue
        shelf = shelves.setdefault(player.id, TrophyShelf(player=player, trophies=[]))
        shelf.trophies.append(tournament)
    return sorted(shelves.values(), key=lambda s: (-len(s.trophies), s.player.name.lower()))
