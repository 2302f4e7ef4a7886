"""
联系人服务类
"""
# 标准库导包
import logging
from typing import List, Optional

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from exceptions import ForbiddenError, NotFoundError
from models import Identity
from storage.models.person import Person
from storage.repositories.person_repository import PersonRepository

# 配置日志
logger = logging.getLogger(__name__)


class PersonService:
    """联系人服务类，联系人只对其所有者可见"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.person_repo = PersonRepository(session)

    async def create_person(
        self,
        identity: Identity,
        name: str,
        surname: str,
        nickname: Optional[str] = None
    ) -> Person:
        person = await self.person_repo.create(
            owner_id=identity.user_id,
            name=name,
            surname=surname,
            nickname=nickname,
        )
        logger.info(f"创建联系人成功: person_id={person.id}, owner_id={identity.user_id}")
        return person

    async def list_persons(self, identity: Identity) -> List[Person]:
        return await self.person_repo.get_by_owner_id(identity.user_id)

    async def delete_person(self, person_id: int, identity: Identity) -> None:
        """
        删除联系人，提及该联系人的关联由外键级联删除，条目本身保留

        Raises:
            NotFoundError: 联系人不存在
            ForbiddenError: 不是所有者
        """
        person = await self.person_repo.get_by_id(person_id)
        if person is None:
            raise NotFoundError(f"联系人不存在: {person_id}")
        if person.owner_id != identity.user_id:
            raise ForbiddenError("无权删除该联系人")

        await self.person_repo.delete_by_id(person_id)
        await self.session.flush()
        logger.info(f"删除联系人成功: person_id={person_id}, owner_id={identity.user_id}")
