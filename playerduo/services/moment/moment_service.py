"""
모먼트(플레이어 게시물) 서비스
"""
import logging
from typing import Optional, List, Dict, Any, Tuple

from playerduo.core.exceptions import NotFoundError, InvalidInputError, AuthorizationError
from playerduo.models.domain.game import GamePlayer
from playerduo.models.domain.moment import Moment, MomentImage
from playerduo.models.domain.user import User
from playerduo.models.enums import MomentStatus, NotificationType
from playerduo.repositories.game_repository import GamePlayerRepository, PlayerFollowRepository
from playerduo.repositories.moment_repository import MomentRepository
from playerduo.services.notification.notification_service import NotificationService

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1000
MAX_IMAGES = 10
PREVIEW_LENGTH = 50
ACCESS_DENIED_MESSAGE = "Moment not found or access denied"

def validate_moment_input(content: Optional[str], image_urls: Optional[List[str]]) -> Tuple[str, List[str]]:
    """본문 / 이미지 검증 후 정리된 값 반환"""
    if content is None or not content.strip():
        raise InvalidInputError("Content cannot be empty")
    if len(content) > MAX_CONTENT_LENGTH:
        raise InvalidInputError(f"Content cannot exceed {MAX_CONTENT_LENGTH} characters")

    image_urls = image_urls or []
    if len(image_urls) > MAX_IMAGES:
        raise InvalidInputError(f"Maximum {MAX_IMAGES} images allowed per moment")
    cleaned = []
    for url in image_urls:
        if url is None or not url.strip():
            raise InvalidInputError("Image URL cannot be empty")
        cleaned.append(url.strip())
    return content.strip(), cleaned

def build_images(image_urls: List[str]) -> List[MomentImage]:
    # display_order 는 1부터
    return [MomentImage(image_url=url, display_order=i) for i, url in enumerate(image_urls, start=1)]

class MomentService:

    def __init__(
        self,
        moment_repo: MomentRepository,
        game_player_repo: GamePlayerRepository,
        follow_repo: PlayerFollowRepository,
        notification_service: NotificationService,
    ):
        self.moment_repo = moment_repo
        self.game_player_repo = game_player_repo
        self.follow_repo = follow_repo
        self.notification_service = notification_service

    async def _to_dto(self, moment: Moment, follower_counts: Optional[Dict[int, int]] = None) -> Dict[str, Any]:
        game_player = moment.game_player
        if follower_counts is not None:
            follower_count = follower_counts.get(game_player.id, 0)
        else:
            follower_count = await self.follow_repo.count_followers(game_player.id)
        return {
            "id": moment.id,
            "game_player_id": game_player.id,
            "game_player_username": game_player.username,
            "game_name": game_player.game.name if game_player.game is not None else None,
            "content": moment.content,
            "image_urls": [image.image_url for image in moment.images],
            "status": moment.status,
            "created_at": moment.created_at,
            "updated_at": moment.updated_at,
            "follower_count": follower_count,
            "player_user_id": game_player.user_id,
        }

    async def _to_dtos(self, moments) -> List[Dict[str, Any]]:
        counts = await self.follow_repo.follower_counts(list({m.game_player_id for m in moments}))
        return [await self._to_dto(m, counts) for m in moments]

    async def create_moment(self, game_player_id: int, user: User, content: str, image_urls: Optional[List[str]] = None) -> Dict[str, Any]:
        game_player = await self.game_player_repo.get(game_player_id)
        if game_player is None:
            raise NotFoundError("GamePlayer", game_player_id, "Game player not found")
        if game_player.user_id != user.id:
            raise AuthorizationError("You can only post moments for your own game player profile")

        content, image_urls = validate_moment_input(content, image_urls)
        moment = await self.moment_repo.add(Moment(
            game_player_id=game_player.id,
            game_player=game_player,
            content=content,
            status=MomentStatus.ACTIVE,
            images=build_images(image_urls),
        ))
        logger.info(f"Moment {moment.id} created by game player {game_player.id} with {len(image_urls)} images")

        await self._notify_followers(game_player, moment)
        return await self._to_dto(moment)

    async def _notify_followers(self, game_player: GamePlayer, moment: Moment) -> None:
        follower_ids = await self.follow_repo.follower_user_ids(game_player.id)
        title = f"{game_player.username} vừa đăng khoảnh khắc mới!"
        body = moment.content[:PREVIEW_LENGTH] + "..."
        for follower_id in follower_ids:
            await self.notification_service.create_notification(
                follower_id,
                title,
                body,
                NotificationType.MOMENT.value,
                action_url=f"/player/{game_player.id}/moments",
                reference_id=moment.id,
            )

    async def get_moment(self, moment_id: int) -> Dict[str, Any]:
        moment = await self.moment_repo.get_visible(moment_id)
        if moment is None:
            raise NotFoundError("Moment", moment_id, "Moment not found")
        return await self._to_dto(moment)

    async def get_player_moments(self, game_player_id: int, offset: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        if await self.game_player_repo.get(game_player_id) is None:
            raise NotFoundError("GamePlayer", game_player_id, "Game player not found")
        moments, total = await self.moment_repo.page_by_players([game_player_id], MomentStatus.ACTIVE, offset, limit)
        return await self._to_dtos(moments), total

    async def get_my_moments(self, user: User, offset: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        game_players = await self.game_player_repo.find_by_user(user.id)
        moments, total = await self.moment_repo.page_by_players(
            [gp.id for gp in game_players], MomentStatus.ACTIVE, offset, limit
        )
        return await self._to_dtos(moments), total

    async def get_feed(self, user: User, offset: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        """팔로우한 플레이어들의 모먼트 (팔로우가 없으면 빈 페이지)"""
        followed = await self.follow_repo.followed_player_ids(user.id)
        moments, total = await self.moment_repo.page_by_players(followed, MomentStatus.ACTIVE, offset, limit)
        return await self._to_dtos(moments), total

    async def get_all_moments(self, offset: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        moments, total = await self.moment_repo.page_by_status(MomentStatus.ACTIVE, offset, limit)
        return await self._to_dtos(moments), total

    async def _get_owned(self, moment_id: int, user: User) -> Moment:
        moment = await self.moment_repo.get_owned(moment_id, user.id)
        if moment is None:
            raise NotFoundError("Moment", moment_id, ACCESS_DENIED_MESSAGE)
        return moment

    async def update_moment(self, moment_id: int, user: User, content: str, image_urls: Optional[List[str]] = None) -> Dict[str, Any]:
        moment = await self._get_owned(moment_id, user)
        content, image_urls = validate_moment_input(content, image_urls)
        moment.content = content
        moment.images = build_images(image_urls)
        await self.moment_repo.save(moment)
        return await self._to_dto(moment)

    async def delete_moment(self, moment_id: int, user: User) -> None:
        """소프트 삭제"""
        moment = await self._get_owned(moment_id, user)
        moment.status = MomentStatus.DELETED
        await self.moment_repo.save(moment)
        logger.info(f"Moment {moment_id} deleted by user {user.id}")

    async def toggle_visibility(self, moment_id: int, user: User) -> Dict[str, Any]:
        moment = await self._get_owned(moment_id, user)
        moment.status = MomentStatus.HIDDEN if moment.status == MomentStatus.ACTIVE else MomentStatus.ACTIVE
        await self.moment_repo.save(moment)
        return await self._to_dto(moment)
