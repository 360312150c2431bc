from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.openapi.docs import get_swagger_ui_html

from playerduo.core.config import settings

def custom_openapi(app: FastAPI):
    """Generate a custom OpenAPI schema."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="""
        # PlayerDuo 마켓플레이스 API

        게임 동행 플레이어 고용, 코인 지갑, 결제 게이트웨이(VNPay), 모먼트, 신고, 알림 기능을 제공합니다.

        ## 인증

        로그인 후 발급된 액세스 토큰을 Authorization 헤더에 포함합니다:
        ```
        Authorization: Bearer <access_token>
        ```

        ## 응답 형식

        성공 응답은 `{"success": true, "message": ..., "data": ...}`,
        에러 응답은 `{"success": false, "message": ..., "error_code": ...}` 형식을 따릅니다.
        VNPay IPN 엔드포인트만 VNPay 계약(`RspCode`, `Message`)으로 응답합니다.

        주요 에러 코드:
        - `authentication_failed`: 인증 실패
        - `permission_denied`: 권한 없음
        - `resource_not_found`: 리소스 찾을 수 없음
        - `insufficient_funds`: 잔액 부족
        - `invalid_amount`: 잘못된 금액
        - `invalid_payment_status`: 잘못된 결제 상태
        - `conflict`: 중복 리소스
        """,
        routes=app.routes,
    )

    openapi_schema["tags"] = [
        {"name": "Authentication", "description": "회원가입, 로그인, 비밀번호 재설정"},
        {"name": "Users", "description": "사용자 프로필 및 관리자 사용자 관리"},
        {"name": "Games", "description": "게임 카탈로그"},
        {"name": "Game Players", "description": "게임 플레이어 프로필 및 팔로우"},
        {"name": "Payments", "description": "코인 지갑, 고용, 결제 게이트웨이"},
        {"name": "Moments", "description": "플레이어 모먼트"},
        {"name": "Notifications", "description": "사용자 알림"},
        {"name": "Reports", "description": "플레이어 신고"},
        {"name": "Health", "description": "API 상태 확인"},
    ]

    openapi_schema.setdefault("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Access token issued by /api/auth/login",
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema

def register_openapi(app: FastAPI):
    """Register custom OpenAPI schema and Swagger UI endpoint."""
    app.openapi = lambda: custom_openapi(app)

    @app.get("/api/docs", include_in_schema=False)
    async def custom_swagger_ui_html_endpoint():
        return get_swagger_ui_html(
            openapi_url=app.openapi_url,
            title=app.title + " - Swagger UI",
            swagger_js_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js",
            swagger_css_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css",
        )
