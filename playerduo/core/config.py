import secrets
from typing import List, Optional, Union, Any
from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 기본 설정
    PROJECT_NAME: str = "PlayerDuo Marketplace API"
    PROJECT_DESCRIPTION: str = "Backend API for hiring game player-companions"
    API_V1_PREFIX: str = "/api"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False
    LOG_FILE: str | None = None
    ENVIRONMENT: str = "dev" # dev, test, prod

    # 보안 설정
    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_RESET_TOKEN_MINUTES: int = 30

    # CORS 설정
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # 데이터베이스 설정
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "playerduo"
    POSTGRES_PORT: str = "5432"
    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(None, validate_default=True)

    @field_validator("SQLALCHEMY_DATABASE_URI", mode='before')
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        # DATABASE_URL이 있으면 그대로 사용 (sqlite+aiosqlite 포함)
        database_url = info.data.get("DATABASE_URL")
        if database_url:
            return database_url
        if isinstance(v, str):
            return v

        values = info.data
        return (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}:{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )

    # Redis 설정 (없으면 캐시 비활성화)
    REDIS_URL: Optional[str] = None
    BALANCE_CACHE_TTL_SECONDS: int = 60

    # VNPay 설정
    VNPAY_TMN_CODE: str = "DEMOTMN1"
    VNPAY_HASH_SECRET: str = "CHANGE_ME_VNPAY_SECRET"
    VNPAY_PAY_URL: str = "https://sandbox.vnpayment.vn/paymentv2/vpcpay.html"
    VNPAY_RETURN_URL: str = "http://localhost:8000/api/payments/vnpay-return"
    VNPAY_VERSION: str = "2.1.0"
    VNPAY_LOCALE: str = "vn"
    VNPAY_EXPIRE_MINUTES: int = 15

    # 계좌 이체 안내 정보
    BANK_ACCOUNT: str = "123456789"
    BANK_NAME: str = "Ngân hàng ABC"
    BANK_OWNER: str = "CTY TNHH PLAYERDUO"

    # 푸시 알림 (외부 전달 서비스)
    PUSH_WEBHOOK_URL: Optional[str] = None
    PUSH_TIMEOUT_SECONDS: float = 5.0

    # 업로드 파일 경로
    UPLOAD_DIR: str = "uploads"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = 'ignore'


def get_settings():
    """
    설정 싱글톤 인스턴스 가져오기

    Returns:
        Settings: 설정 객체
    """
    environment = os.getenv("ENVIRONMENT", "dev").lower()
    env_file = f".env.{environment}" if environment != "prod" else ".env" # 환경별 .env 파일 지정
    return Settings(_env_file=env_file)


settings = get_settings()
