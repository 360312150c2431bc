import pytest

from playerduo.core.exceptions import (
    AuthorizationError, BusinessLogicError, ConflictError, InvalidInputError, NotFoundError,
)
from playerduo.models.enums import GamePlayerStatus, GameStatus, Role

# --- 게임 카탈로그 ---

@pytest.mark.asyncio
async def test_create_game_rejects_duplicate_name(services):
    game = await services.game.create_game({"name": "Valorant", "status": GameStatus.ACTIVE, "available_ranks": ["Iron"]})
    assert game.status == "ACTIVE"
    assert game.available_ranks == ["Iron"]

    with pytest.raises(InvalidInputError):
        await services.game.create_game({"name": "Valorant"})

@pytest.mark.asyncio
async def test_list_games_includes_player_counts(services, make_game, make_game_player, make_user):
    lol = await make_game("LoL")
    await make_game("Dota 2")
    await make_game_player(await make_user(), game=lol)
    await make_game_player(await make_user(), game=lol)

    games = await services.game.list_games()

    counts = {item["game"].name: item["player_count"] for item in games}
    assert counts["LoL"] == 2
    assert counts["Dota 2"] == 0

@pytest.mark.asyncio
async def test_update_game_name_conflict(services, make_game):
    await make_game("LoL")
    dota = await make_game("Dota 2")

    with pytest.raises(InvalidInputError):
        await services.game.update_game(dota.id, {"name": "LoL"})

    updated = await services.game.update_game(dota.id, {"name": "Dota 2", "status": GameStatus.INACTIVE})
    assert updated.status == "INACTIVE"

@pytest.mark.asyncio
async def test_delete_game_with_players_is_blocked(services, make_game, make_game_player, make_user):
    game = await make_game("LoL")
    await make_game_player(await make_user(), game=game)
    empty = await make_game("Empty")

    with pytest.raises(BusinessLogicError):
        await services.game.delete_game(game.id)

    await services.game.delete_game(empty.id)
    with pytest.raises(NotFoundError):
        await services.game.get_game(empty.id)

# --- 게임 플레이어 ---

@pytest.mark.asyncio
async def test_register_grants_player_role(services, make_user, make_game):
    user = await make_user()
    game = await make_game("LoL")

    game_player = await services.game_player.register(
        user, {"game_id": game.id, "username": "midlaner", "price_per_hour": 120, "rank": "Gold"}
    )

    assert game_player.status == GamePlayerStatus.AVAILABLE
    assert game_player.price_per_hour == 120
    assert user.has_role(Role.PLAYER)

    with pytest.raises(ConflictError):
        await services.game_player.register(user, {"game_id": game.id, "username": "again", "price_per_hour": 1})

@pytest.mark.asyncio
async def test_update_own_profile_only(services, make_user, make_game_player):
    owner = await make_user()
    other = await make_user()
    game_player = await make_game_player(owner)

    updated = await services.game_player.update(owner, game_player.id, {"price_per_hour": 300, "rank": None})
    assert updated.price_per_hour == 300

    with pytest.raises(AuthorizationError):
        await services.game_player.update(other, game_player.id, {"price_per_hour": 1})
    with pytest.raises(BusinessLogicError):
        await services.game_player.update(owner, game_player.id, {"status": GamePlayerStatus.HIRED})

@pytest.mark.asyncio
async def test_delete_hired_profile_is_blocked(services, make_user, make_game_player):
    owner = await make_user()
    game_player = await make_game_player(owner, status=GamePlayerStatus.HIRED)

    with pytest.raises(BusinessLogicError):
        await services.game_player.delete(owner, game_player.id)

@pytest.mark.asyncio
async def test_admin_can_delete_any_profile(services, make_user, make_game_player):
    admin = await make_user(roles=[Role.ADMIN])
    game_player = await make_game_player(await make_user())

    await services.game_player.delete(admin, game_player.id)

    with pytest.raises(NotFoundError):
        await services.game_player.get_game_player(game_player.id)

@pytest.mark.asyncio
async def test_follow_unfollow_and_status(services, make_user, make_game_player):
    owner = await make_user()
    fan = await make_user()
    game_player = await make_game_player(owner)

    with pytest.raises(BusinessLogicError):
        await services.game_player.follow(owner, game_player.id)

    await services.game_player.follow(fan, game_player.id)
    with pytest.raises(ConflictError):
        await services.game_player.follow(fan, game_player.id)

    assert await services.game_player.follow_status(fan, game_player.id) == {
        "game_player_id": game_player.id, "following": True, "follower_count": 1,
    }
    anonymous = await services.game_player.follow_status(None, game_player.id)
    assert anonymous["following"] is False

    await services.game_player.unfollow(fan, game_player.id)
    assert (await services.game_player.follow_status(fan, game_player.id))["follower_count"] == 0
    with pytest.raises(NotFoundError):
        await services.game_player.unfollow(fan, game_player.id)

@pytest.mark.asyncio
async def test_summaries_include_orders_and_revenue(services, make_user, make_game_player):
    renter = await make_user(coin=1000)
    owner = await make_user()
    game_player = await make_game_player(owner, price_per_hour=100)
    result = await services.hire.hire(renter, game_player.id, 2)
    await services.hire.confirm_hire(owner, result["order"].id)

    summaries = await services.game_player.get_summaries()

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary["total_orders"] == 1
    assert summary["total_revenue"] == 200
    assert summary["total_reviews"] == 0
    assert summary["rank_label"] == "Chưa xếp hạng"
    assert summary["email"] == owner.email
