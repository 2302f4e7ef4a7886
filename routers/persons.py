"""
联系人路由
提供联系人的创建、查询、删除接口，联系人用于日记中的提及
"""
# 标准库导包
import logging

# 第三方库导包
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from exceptions import JournalError
from models import (
    Identity,
    CreatePersonRequest,
    PersonResponse,
    PersonDetailResponse,
    PersonListResponse,
)
from routers.services.person_service import PersonService
from storage.database import get_session
from utils import get_current_identity

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/persons",
    tags=["联系人"]
)


def _person_to_response(person) -> PersonResponse:
    return PersonResponse(
        id=person.id,
        name=person.name,
        surname=person.surname,
        nickname=person.nickname,
        created_at=person.created_at
    )


@router.post("", response_model=PersonDetailResponse, status_code=status.HTTP_201_CREATED, summary="创建联系人")
async def create_person(
    request: CreatePersonRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    try:
        person_service = PersonService(session)
        person = await person_service.create_person(
            identity=identity,
            name=request.name,
            surname=request.surname,
            nickname=request.nickname
        )
        return PersonDetailResponse(data=_person_to_response(person))

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"创建联系人失败: {str(e)}")
        raise JournalError("创建联系人失败") from e


@router.get("", response_model=PersonListResponse, summary="获取联系人列表")
async def list_persons(
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """只返回当前用户自己的联系人"""
    try:
        person_service = PersonService(session)
        persons = await person_service.list_persons(identity)
        data = [_person_to_response(person) for person in persons]
        return PersonListResponse(data=data, total=len(data))

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"获取联系人列表失败: {str(e)}")
        raise JournalError("获取联系人列表失败") from e


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT, summary="删除联系人")
async def delete_person(
    person_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """删除联系人，相关提及一并删除，日记条目保留"""
    try:
        person_service = PersonService(session)
        await person_service.delete_person(person_id, identity)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"删除联系人失败: person_id={person_id}, error={str(e)}")
        raise JournalError("删除联系人失败") from e
