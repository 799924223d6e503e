# Import all models here so callers can use `from scoreverse.models import ...`
from .player_model import PlayerModel
from .game_model import GameModel
from .match_model import MatchModel, PointsAward, HandicapSuggestion
from .space_model import SpaceModel
from .tournament_model import TournamentModel, TournamentStatus
from .user_model import UserModel
from .stats_model import ScoreData, PlayerStats, PlayerGameStats, CurrentStreak, TrophyShelf
