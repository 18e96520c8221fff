from nocturna.db.schema import MEMBERS
from nocturna.models.domain.member_domain import Member, MemberStatus
from nocturna.repositories.base import DocumentRepository


class MemberRepository(DocumentRepository[Member]):
    collection = MEMBERS
    model = Member

    @classmethod
    async def list_members(
        cls,
        section_id: str | None = None,
        status: MemberStatus | None = None,
        name_query: str | None = None,
    ) -> list[Member]:
        filters = {}
        if section_id:
            filters["section_id"] = section_id
        if status:
            filters["status"] = status.value

        search = ("full_name", name_query) if name_query else None
        return await cls.find(filters, search=search, order_by="full_name")

    @classmethod
    async def get_many(cls, member_ids: list[str]) -> dict[str, Member]:
        members = {}
        for member_id in dict.fromkeys(member_ids):
            member = await cls.get(member_id)
            if member is not None:
                members[member_id] = member
        return members
