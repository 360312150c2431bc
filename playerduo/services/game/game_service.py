"""
게임 카탈로그 서비스
"""
import logging
from typing import Dict, Any, List

from playerduo.core.exceptions import NotFoundError, InvalidInputError, BusinessLogicError
from playerduo.models.domain.game import Game
from playerduo.repositories.game_repository import GameRepository

logger = logging.getLogger(__name__)

GAME_FIELDS = (
    "name", "description", "category", "platform", "status", "image_url", "website_url",
    "requirements", "has_roles", "available_roles", "available_ranks",
)

def _game_values(data: Dict[str, Any]) -> Dict[str, Any]:
    values = {k: v for k, v in data.items() if k in GAME_FIELDS}
    status = values.get("status")
    if status is not None:
        values["status"] = getattr(status, "value", status)
    return values

class GameService:

    def __init__(self, game_repo: GameRepository):
        self.game_repo = game_repo

    async def get_game(self, game_id: int) -> Game:
        game = await self.game_repo.get(game_id)
        if game is None:
            raise NotFoundError("Game", game_id)
        return game

    async def list_games(self) -> List[Dict[str, Any]]:
        """등록 플레이어 수를 포함한 게임 목록"""
        games = await self.game_repo.find_all()
        counts = await self.game_repo.player_counts()
        return [{"game": game, "player_count": counts.get(game.id, 0)} for game in games]

    async def create_game(self, data: Dict[str, Any]) -> Game:
        if await self.game_repo.get_by_name(data["name"]) is not None:
            raise InvalidInputError("Game name already exists")
        game = await self.game_repo.add(Game(**_game_values(data)))
        logger.info(f"Game {game.id} ({game.name}) created")
        return game

    async def update_game(self, game_id: int, data: Dict[str, Any]) -> Game:
        game = await self.get_game(game_id)
        values = _game_values(data)
        new_name = values.get("name")
        if new_name and new_name != game.name and await self.game_repo.get_by_name(new_name) is not None:
            raise InvalidInputError("Game name already exists")
        for field, value in values.items():
            setattr(game, field, value)
        return await self.game_repo.save(game)

    async def delete_game(self, game_id: int) -> None:
        game = await self.get_game(game_id)
        player_count = await self.game_repo.count_players(game_id)
        if player_count > 0:
            raise BusinessLogicError(f"Không thể xóa game vì còn {player_count} player đang đăng ký game này.")
        await self.game_repo.delete(game)
        logger.info(f"Game {game_id} deleted")
