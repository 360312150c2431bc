# tests/conftest.py
import os

# 설정 모듈 임포트 전에 테스트 환경 변수 지정
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-playerduo"
os.environ["VNPAY_TMN_CODE"] = "TESTTMN1"
os.environ["VNPAY_HASH_SECRET"] = "TESTHASHSECRET"
os.environ.pop("REDIS_URL", None)
os.environ.pop("PUSH_WEBHOOK_URL", None)

import pytest
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, List, Optional
from unittest.mock import AsyncMock

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from playerduo.core.dependencies import get_db
from playerduo.core.security import create_access_token, get_password_hash
from playerduo.db.database import Base
from playerduo.main import app as main_app
from playerduo.models.domain.game import Game, GamePlayer
from playerduo.models.domain.user import User
from playerduo.models.enums import GamePlayerStatus, Role
from playerduo.repositories.game_repository import GameRepository, GamePlayerRepository, PlayerFollowRepository
from playerduo.repositories.moment_repository import MomentRepository
from playerduo.repositories.notification_repository import NotificationRepository
from playerduo.repositories.payment_repository import PaymentRepository, OrderRepository, PlayerReviewRepository
from playerduo.repositories.report_repository import ReportRepository
from playerduo.repositories.user_repository import UserRepository, UserBlockRepository, PasswordResetTokenRepository
from playerduo.services.auth.auth_service import AuthService
from playerduo.services.game.game_player_service import GamePlayerService
from playerduo.services.game.game_service import GameService
from playerduo.services.moment.moment_service import MomentService
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.payment.gateway_service import PaymentGatewayService
from playerduo.services.payment.vnpay_service import VnPayService
from playerduo.services.report.report_service import ReportService
from playerduo.services.user.user_service import UserService
from playerduo.services.wallet.hire_service import HireService
from playerduo.services.wallet.wallet_service import WalletService

TEST_PASSWORD = "secret-password"
# bcrypt 해시는 한 번만 계산
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

TEST_VNPAY_SECRET = "TESTHASHSECRET"

# --- Database ---

@pytest.fixture(scope="function")
async def db_engine():
    """테스트마다 새 in-memory SQLite 엔진 (단일 연결 공유)"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

@pytest.fixture(scope="function")
def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)

@pytest.fixture(scope="function")
async def db_session(db_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with db_session_factory() as session:
        yield session

# --- Factories ---

@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def _make_user(
        username: Optional[str] = None,
        coin: int = 0,
        roles: Optional[List[Role]] = None,
        **fields,
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password_hash=TEST_PASSWORD_HASH,
            coin=coin,
            roles=[r.value for r in (roles or [Role.USER])],
            enabled=fields.pop("enabled", True),
            account_non_locked=fields.pop("account_non_locked", True),
            is_online=fields.pop("is_online", False),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user

@pytest.fixture
def make_game(db_session):
    async def _make_game(name: str = "League of Legends", **fields) -> Game:
        game = Game(name=name, status="ACTIVE", has_roles=False, available_roles=[], available_ranks=[], **fields)
        db_session.add(game)
        await db_session.commit()
        return game

    return _make_game

@pytest.fixture
def make_game_player(db_session, make_game):
    async def _make_game_player(
        owner: User,
        price_per_hour: int = 100,
        game: Optional[Game] = None,
        status: GamePlayerStatus = GamePlayerStatus.AVAILABLE,
        **fields,
    ) -> GamePlayer:
        if game is None:
            game = await make_game(name=f"Game for {owner.username}")
        game_player = GamePlayer(
            user_id=owner.id,
            game_id=game.id,
            user=owner,
            game=game,
            username=fields.pop("username", f"{owner.username}_duo"),
            price_per_hour=price_per_hour,
            status=status,
            total_hours=0,
            **fields,
        )
        db_session.add(game_player)
        await db_session.commit()
        return game_player

    return _make_game_player

@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD

@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token(user.id, roles=list(user.roles or []))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

@pytest.fixture
def fetch_user(db_session_factory):
    """다른 세션에서 커밋된 최신 상태 조회"""
    async def _fetch_user(user_id: int) -> User:
        async with db_session_factory() as session:
            return await session.get(User, user_id)

    return _fetch_user

# --- Services ---

@pytest.fixture
def push_sender():
    return AsyncMock()

@pytest.fixture
def vnpay():
    return VnPayService(
        tmn_code="TESTTMN1",
        hash_secret=TEST_VNPAY_SECRET,
        pay_url="https://sandbox.vnpayment.vn/paymentv2/vpcpay.html",
        return_url="http://test/api/payments/vnpay-return",
    )

@pytest.fixture
def services(db_session, push_sender, vnpay) -> SimpleNamespace:
    """같은 세션을 공유하는 서비스 묶음"""
    notification = NotificationService(NotificationRepository(db_session), UserRepository(db_session), push_sender)
    wallet = WalletService(
        user_repo=UserRepository(db_session),
        payment_repo=PaymentRepository(db_session),
        order_repo=OrderRepository(db_session),
        game_player_repo=GamePlayerRepository(db_session),
        block_repo=UserBlockRepository(db_session),
        notification_service=notification,
    )
    user = UserService(UserRepository(db_session), UserBlockRepository(db_session))
    return SimpleNamespace(
        notification=notification,
        wallet=wallet,
        hire=HireService(
            wallet_service=wallet,
            payment_repo=PaymentRepository(db_session),
            order_repo=OrderRepository(db_session),
            review_repo=PlayerReviewRepository(db_session),
            game_player_repo=GamePlayerRepository(db_session),
            block_repo=UserBlockRepository(db_session),
            notification_service=notification,
        ),
        gateway=PaymentGatewayService(
            vnpay=vnpay,
            payment_repo=PaymentRepository(db_session),
            user_repo=UserRepository(db_session),
            wallet_service=wallet,
            notification_service=notification,
        ),
        user=user,
        auth=AuthService(UserRepository(db_session), PasswordResetTokenRepository(db_session), user),
        game=GameService(GameRepository(db_session)),
        game_player=GamePlayerService(
            GamePlayerRepository(db_session), GameRepository(db_session), PlayerFollowRepository(db_session), user
        ),
        moment=MomentService(
            MomentRepository(db_session),
            GamePlayerRepository(db_session),
            PlayerFollowRepository(db_session),
            notification,
        ),
        report=ReportService(ReportRepository(db_session), GamePlayerRepository(db_session), notification),
    )

# --- API ---

@pytest.fixture(scope="function")
def app(db_session_factory) -> FastAPI:
    """요청마다 테스트 엔진 세션을 사용하도록 get_db 오버라이드"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    main_app.dependency_overrides[get_db] = override_get_db
    yield main_app
    main_app.dependency_overrides = {}

@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
