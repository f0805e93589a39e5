"""
Read side of the identity collaborator: users, roles and bearer sessions.
Accounts are provisioned outside this service.
"""

from zoocare.errors import NotFound, Unauthorized, check_identifier
from zoocare.models import Session, User, UserType
from zoocare.services.base import BaseService


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def session_key(token: str) -> str:
    return f"session:{token}"


class UserDirectory(BaseService):
    def find(self, user_id: str) -> User | None:
        user = self.db.get(user_key(user_id))
        return user if isinstance(user, User) else None

    def get(self, user_id: str) -> User:
        check_identifier(user_id, "userId")
        user = self.find(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def find_vet(self, vet_id: str) -> User | None:
        user = self.find(vet_id)
        if user is None or user.user_type != UserType.VET:
            return None
        return user

    def list_by_type(self, user_type: UserType) -> list[User]:
        users = [
            u
            for u in self.db.all()
            if isinstance(u, User) and u.user_type == user_type
        ]
        return sorted(users, key=lambda u: u.name.lower())

    def list_vets(self) -> list[User]:
        return self.list_by_type(UserType.VET)

    def list_regular_users(self) -> list[User]:
        return self.list_by_type(UserType.USER)

    def count_regular_users(self) -> int:
        return len(self.list_regular_users())

    def resolve_token(self, token: str | None) -> User:
        if not token:
            raise Unauthorized("Authorization token missing.")
        session = self.db.get(session_key(token))
        if not isinstance(session, Session):
            raise Unauthorized("Invalid or expired token.")
        user = self.find(session.user_id)
        if user is None:
            raise Unauthorized("Invalid or expired token.")
        return user
