from .link import LinkCreate, LinkResponse, LinkDetail, LinkList
from .user import UserCreate, UserLogin, UserResponse, Token
from .analytics import DashboardAnalytics, LinkAnalytics

__all__ = [
    "LinkCreate", "LinkResponse", "LinkDetail", "LinkList",
    "UserCreate", "UserLogin", "UserResponse", "Token",
    "DashboardAnalytics", "LinkAnalytics",
]
