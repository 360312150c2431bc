"""
도메인 모델 패키지
"""

# 관계(relationship) 문자열 참조가 해석되도록 모든 모델을 등록한다
from .user import User, PasswordResetToken, UserBlock
from .game import Game, GamePlayer, PlayerFollow
from .payment import Payment, Order, PlayerReview
from .moment import Moment, MomentImage
from .notification import Notification
from .report import Report

__all__ = [
    "User",
    "PasswordResetToken",
    "UserBlock",
    "Game",
    "GamePlayer",
    "PlayerFollow",
    "Payment",
    "Order",
    "PlayerReview",
    "Moment",
    "MomentImage",
    "Notification",
    "Report",
]
