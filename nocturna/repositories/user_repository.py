from nocturna.db.schema import USERS
from nocturna.models.domain.user_domain import User
from nocturna.repositories.base import DocumentRepository


class UserRepository(DocumentRepository[User]):
    collection = USERS
    model = User

    @classmethod
    async def get_by_email(cls, email: str) -> User | None:
        return await cls.find_one({"email": email.lower()})
