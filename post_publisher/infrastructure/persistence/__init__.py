from .database import Database
from .models import Base, NotificationModel, SocialPostModel, TeamCredentialModel
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "Base",
    "Database",
    "NotificationModel",
    "SocialPostModel",
    "SqlAlchemyUnitOfWork",
    "TeamCredentialModel",
]
