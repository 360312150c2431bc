import pytest
from sqlalchemy import select

from playerduo.core.exceptions import AuthorizationError, InvalidInputError, NotFoundError
from playerduo.models.domain.game import PlayerFollow
from playerduo.models.domain.notification import Notification
from playerduo.models.enums import MomentStatus
from playerduo.services.moment.moment_service import (
    ACCESS_DENIED_MESSAGE, MAX_CONTENT_LENGTH, MAX_IMAGES, validate_moment_input,
)

@pytest.fixture
async def author(make_user, make_game_player):
    owner = await make_user(username="streamer")
    game_player = await make_game_player(owner)
    return owner, game_player

# --- 입력 검증 ---

def test_validate_moment_input_strips_values():
    content, urls = validate_moment_input("  hello  ", [" http://img/1.png "])
    assert content == "hello"
    assert urls == ["http://img/1.png"]

@pytest.mark.parametrize("content, urls", [
    ("", None),
    ("   ", None),
    ("x" * (MAX_CONTENT_LENGTH + 1), None),
    ("ok", [f"http://img/{i}.png" for i in range(MAX_IMAGES + 1)]),
    ("ok", ["http://img/1.png", "  "]),
])
def test_validate_moment_input_rejects(content, urls):
    with pytest.raises(InvalidInputError):
        validate_moment_input(content, urls)

def test_validate_moment_input_accepts_limits():
    content, urls = validate_moment_input("x" * MAX_CONTENT_LENGTH, [f"u{i}" for i in range(MAX_IMAGES)])
    assert len(content) == MAX_CONTENT_LENGTH
    assert len(urls) == MAX_IMAGES

# --- 작성 / 조회 ---

@pytest.mark.asyncio
async def test_create_moment_orders_images_and_notifies_followers(services, author, make_user, db_session):
    owner, game_player = author
    follower = await make_user()
    db_session.add(PlayerFollow(follower_id=follower.id, game_player_id=game_player.id))
    await db_session.commit()

    dto = await services.moment.create_moment(game_player.id, owner, "x" * 60, ["a.png", "b.png"])

    assert dto["image_urls"] == ["a.png", "b.png"]
    assert dto["status"] == MomentStatus.ACTIVE
    assert dto["follower_count"] == 1
    assert dto["player_user_id"] == owner.id

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert len(notifications) == 1
    assert notifications[0].user_id == follower.id
    assert notifications[0].type == "moment"
    assert notifications[0].message == "x" * 50 + "..."
    assert notifications[0].reference_id == dto["id"]

@pytest.mark.asyncio
async def test_create_moment_for_other_players_profile(services, author, make_user):
    _, game_player = author
    intruder = await make_user()
    with pytest.raises(AuthorizationError):
        await services.moment.create_moment(game_player.id, intruder, "hi")

@pytest.mark.asyncio
async def test_player_moments_pagination_newest_first(services, author):
    owner, game_player = author
    for i in range(3):
        await services.moment.create_moment(game_player.id, owner, f"post {i}")

    first_page, total = await services.moment.get_player_moments(game_player.id, 0, 2)
    second_page, _ = await services.moment.get_player_moments(game_player.id, 2, 2)

    assert total == 3
    assert [m["content"] for m in first_page] == ["post 2", "post 1"]
    assert [m["content"] for m in second_page] == ["post 0"]

@pytest.mark.asyncio
async def test_player_moments_unknown_player(services):
    with pytest.raises(NotFoundError):
        await services.moment.get_player_moments(999, 0, 10)

@pytest.mark.asyncio
async def test_feed_contains_followed_players_only(services, author, make_user, make_game_player, db_session):
    owner, game_player = author
    other_owner = await make_user()
    other_player = await make_game_player(other_owner)
    viewer = await make_user()
    db_session.add(PlayerFollow(follower_id=viewer.id, game_player_id=game_player.id))
    await db_session.commit()

    await services.moment.create_moment(game_player.id, owner, "followed")
    await services.moment.create_moment(other_player.id, other_owner, "not followed")

    feed, total = await services.moment.get_feed(viewer, 0, 10)
    assert total == 1
    assert feed[0]["content"] == "followed"

    empty, empty_total = await services.moment.get_feed(other_owner, 0, 10)
    assert (empty, empty_total) == ([], 0)

    everything, all_total = await services.moment.get_all_moments(0, 10)
    assert all_total == 2

# --- 수정 / 삭제 / 공개 전환 ---

@pytest.mark.asyncio
async def test_update_moment_replaces_images(services, author):
    owner, game_player = author
    dto = await services.moment.create_moment(game_player.id, owner, "old", ["1.png", "2.png"])

    updated = await services.moment.update_moment(dto["id"], owner, "new", ["3.png"])

    assert updated["content"] == "new"
    assert updated["image_urls"] == ["3.png"]

@pytest.mark.asyncio
async def test_non_owner_cannot_modify(services, author, make_user):
    owner, game_player = author
    other = await make_user()
    dto = await services.moment.create_moment(game_player.id, owner, "mine")

    with pytest.raises(NotFoundError) as exc_info:
        await services.moment.update_moment(dto["id"], other, "hacked")
    assert exc_info.value.message == ACCESS_DENIED_MESSAGE

    with pytest.raises(NotFoundError):
        await services.moment.delete_moment(dto["id"], other)

@pytest.mark.asyncio
async def test_toggle_visibility_hides_from_listings(services, author):
    owner, game_player = author
    dto = await services.moment.create_moment(game_player.id, owner, "now you see me")

    hidden = await services.moment.toggle_visibility(dto["id"], owner)
    assert hidden["status"] == MomentStatus.HIDDEN
    assert (await services.moment.get_all_moments(0, 10))[1] == 0

    shown = await services.moment.toggle_visibility(dto["id"], owner)
    assert shown["status"] == MomentStatus.ACTIVE

@pytest.mark.asyncio
async def test_delete_moment_is_soft(services, author):
    owner, game_player = author
    dto = await services.moment.create_moment(game_player.id, owner, "bye")

    await services.moment.delete_moment(dto["id"], owner)

    with pytest.raises(NotFoundError):
        await services.moment.get_moment(dto["id"])
    with pytest.raises(NotFoundError):
        await services.moment.toggle_visibility(dto["id"], owner)
    assert (await services.moment.get_my_moments(owner, 0, 10))[1] == 0
