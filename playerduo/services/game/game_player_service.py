"""
게임 플레이어(동행자) 프로필 및 팔로우 서비스
"""
import logging
from typing import Optional, Dict, Any, List, Sequence

from playerduo.core.exceptions import NotFoundError, AuthorizationError, BusinessLogicError, ConflictError
from playerduo.models.domain.game import GamePlayer, PlayerFollow
from playerduo.models.domain.user import User
from playerduo.models.enums import GamePlayerStatus, Role
from playerduo.repositories.game_repository import GameRepository, GamePlayerRepository, PlayerFollowRepository
from playerduo.services.user.user_service import UserService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "rank", "role", "server", "description", "price_per_hour", "status")
UNRANKED_LABEL = "Chưa xếp hạng"

def game_player_dto(game_player: GamePlayer) -> Dict[str, Any]:
    return {
        "id": game_player.id,
        "user_id": game_player.user_id,
        "game_id": game_player.game_id,
        "game_name": game_player.game.name if game_player.game is not None else None,
        "username": game_player.username,
        "rank": game_player.rank,
        "role": game_player.role,
        "server": game_player.server,
        "description": game_player.description,
        "price_per_hour": game_player.price_per_hour,
        "status": game_player.status,
        "hired_by": game_player.hired_by,
        "hire_date": game_player.hire_date,
        "return_date": game_player.return_date,
        "total_hours": game_player.total_hours or 0,
        "created_at": game_player.created_at,
    }

class GamePlayerService:

    def __init__(
        self,
        game_player_repo: GamePlayerRepository,
        game_repo: GameRepository,
        follow_repo: PlayerFollowRepository,
        user_service: UserService,
    ):
        self.game_player_repo = game_player_repo
        self.game_repo = game_repo
        self.follow_repo = follow_repo
        self.user_service = user_service

    async def get_game_player(self, game_player_id: int) -> GamePlayer:
        game_player = await self.game_player_repo.get(game_player_id)
        if game_player is None:
            raise NotFoundError("GamePlayer", game_player_id, "Game player not found")
        return game_player

    async def list_game_players(self, game_id: Optional[int] = None) -> Sequence[GamePlayer]:
        return await self.game_player_repo.find_by_game(game_id)

    async def get_user_game_players(self, user_id: int) -> Sequence[GamePlayer]:
        return await self.game_player_repo.find_by_user(user_id)

    async def register(self, user: User, data: Dict[str, Any]) -> GamePlayer:
        """게임 플레이어 프로필 등록 (PLAYER 역할 부여)"""
        game = await self.game_repo.get(data["game_id"])
        if game is None:
            raise NotFoundError("Game", data["game_id"])
        if await self.game_player_repo.get_by_user_and_game(user.id, game.id) is not None:
            raise ConflictError("GamePlayer", message="You are already registered as a player for this game")

        game_player = await self.game_player_repo.add(GamePlayer(
            user_id=user.id,
            game_id=game.id,
            user=user,
            game=game,
            username=data["username"],
            rank=data.get("rank"),
            role=data.get("role"),
            server=data.get("server"),
            description=data.get("description"),
            price_per_hour=data["price_per_hour"],
            status=GamePlayerStatus.AVAILABLE,
            total_hours=0,
        ))
        await self.user_service.grant_role(user, Role.PLAYER)
        logger.info(f"User {user.id} registered as game player {game_player.id} for game {game.id}")
        return game_player

    async def update(self, user: User, game_player_id: int, data: Dict[str, Any]) -> GamePlayer:
        game_player = await self.get_game_player(game_player_id)
        if game_player.user_id != user.id:
            raise AuthorizationError("You can only update your own game player profile")
        if data.get("status") == GamePlayerStatus.HIRED:
            raise BusinessLogicError("Status HIRED is set by hiring only")
        for field in UPDATABLE_FIELDS:
            if data.get(field) is not None:
                setattr(game_player, field, data[field])
        return await self.game_player_repo.save(game_player)

    async def delete(self, user: User, game_player_id: int) -> None:
        game_player = await self.get_game_player(game_player_id)
        if game_player.user_id != user.id and not user.has_role(Role.ADMIN):
            raise AuthorizationError("You can only delete your own game player profile")
        if game_player.status == GamePlayerStatus.HIRED:
            raise BusinessLogicError("Cannot delete a game player while hired")
        await self.game_player_repo.delete(game_player)
        logger.info(f"Game player {game_player_id} deleted by user {user.id}")

    async def get_summaries(self) -> List[Dict[str, Any]]:
        """관리자용 플레이어 요약 (주문 수, 리뷰 수, 매출, 평점)"""
        game_players = await self.game_player_repo.find_by_game()
        ids = [gp.id for gp in game_players]
        orders = await self.game_player_repo.order_counts(ids)
        ratings = await self.game_player_repo.rating_stats(ids)
        revenue = await self.game_player_repo.revenue_totals(ids)

        summaries = []
        for gp in game_players:
            avg_rating, review_count = ratings.get(gp.id, (0.0, 0))
            summaries.append({
                "id": gp.id,
                "name": gp.username,
                "email": gp.user.email if gp.user is not None else None,
                "total_orders": orders.get(gp.id, 0),
                "total_reviews": review_count,
                "total_revenue": revenue.get(gp.id, 0),
                "status": gp.status.value,
                "rank_label": gp.rank or UNRANKED_LABEL,
                "rating": round(avg_rating, 1),
                "game_name": gp.game.name if gp.game is not None else None,
                "avatar_url": gp.user.avatar_url if gp.user is not None else None,
            })
        return summaries

    # --- 팔로우 ---

    async def follow(self, user: User, game_player_id: int) -> PlayerFollow:
        game_player = await self.get_game_player(game_player_id)
        if game_player.user_id == user.id:
            raise BusinessLogicError("You cannot follow your own game player profile")
        if await self.follow_repo.get_follow(user.id, game_player_id) is not None:
            raise ConflictError("PlayerFollow", str(game_player_id), "Already following this player")
        follow = await self.follow_repo.add(PlayerFollow(follower_id=user.id, game_player_id=game_player_id))
        logger.info(f"User {user.id} followed game player {game_player_id}")
        return follow

    async def unfollow(self, user: User, game_player_id: int) -> None:
        follow = await self.follow_repo.get_follow(user.id, game_player_id)
        if follow is None:
            raise NotFoundError("PlayerFollow", game_player_id, "Not following this player")
        await self.follow_repo.delete(follow)

    async def follow_status(self, user: Optional[User], game_player_id: int) -> Dict[str, Any]:
        await self.get_game_player(game_player_id)
        following = False
        if user is not None:
            following = await self.follow_repo.get_follow(user.id, game_player_id) is not None
        return {
            "game_player_id": game_player_id,
            "following": following,
            "follower_count": await self.follow_repo.count_followers(game_player_id),
        }
