# 标准库导包
import json
import logging
import threading
from typing import Any, Optional

# 第三方库导包
import redis.asyncio as redis
from redis.asyncio.lock import Lock
from redis.exceptions import RedisError

# 项目内部导包
from config import settings

logger = logging.getLogger(__name__)

# 全局Redis连接池实例
_redis_pool = None
_redis_pool_lock = threading.Lock()


class DummyLock:
    """虚拟锁对象，用于Redis连接失败时的降级处理"""

    async def release(self):
        pass


def get_redis():
    """获取Redis连接实例，支持连接池重建"""
    global _redis_pool

    with _redis_pool_lock:
        if _redis_pool is None:
            logger.info("创建新的Redis连接池...")
            _redis_pool = redis.ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=50,
                socket_timeout=10.0,
                socket_connect_timeout=5.0,
                socket_keepalive=True,  # 保持连接
                health_check_interval=15,
                retry_on_timeout=True,  # 超时重试
                decode_responses=True,
            )
            logger.info(f"Redis连接池创建完成，连接地址: {settings.REDIS_URL}")

        return redis.Redis(connection_pool=_redis_pool)


async def close_redis_pool():
    """关闭Redis连接池"""
    global _redis_pool

    with _redis_pool_lock:
        pool, _redis_pool = _redis_pool, None

    if pool is not None:
        await pool.disconnect()
        logger.info("Redis连接池已关闭")


async def set_cache(key: str, value: Any, ttl: Optional[int] = None):
    """
    设置缓存

    参数:
        key: 缓存键
        value: 缓存值，会被转换为JSON字符串
        ttl: 过期时间（秒），为None时不过期
    """
    r = get_redis()

    if ttl is None:
        await r.set(key, json.dumps(value))
    else:
        await r.setex(key, ttl, json.dumps(value))


async def get_cache(key: str):
    """
    获取缓存

    参数:
        key: 缓存键

    返回:
        若缓存存在，返回解析后的值；否则返回None
    """
    r = get_redis()
    data = await r.get(key)
    if data:
        return json.loads(data)
    return None


async def delete_cache(key: str) -> bool:
    """
    删除缓存

    参数:
        key: 缓存键

    返回:
        是否删除了已存在的键
    """
    r = get_redis()
    return await r.delete(key) > 0


# ========== 登录会话相关的Redis操作封装 ==========

def _auth_session_key(token: str) -> str:
    return f"{settings.REDIS_KEY_PREFIXES['AUTH_SESSION']}{token}"


async def get_auth_session(token: str):
    """
    获取登录会话数据

    参数:
        token: 会话令牌

    返回:
        会话数据字典，如果不存在或已过期返回None
    """
    return await get_cache(_auth_session_key(token))


async def set_auth_session(token: str, session_data: dict, ttl: int = None):
    """
    保存登录会话数据

    参数:
        token: 会话令牌
        session_data: 会话数据（用户身份）
        ttl: 过期时间（秒），默认使用settings.AUTH_SESSION_TTL
    """
    if ttl is None:
        ttl = settings.AUTH_SESSION_TTL
    await set_cache(_auth_session_key(token), session_data, ttl=ttl)
    logger.debug(f"登录会话已保存到Redis，user_id={session_data.get('user_id')}，TTL: {ttl}秒")


async def delete_auth_session(token: str) -> bool:
    """
    删除登录会话

    参数:
        token: 会话令牌

    返回:
        会话是否存在
    """
    return await delete_cache(_auth_session_key(token))


# ========== 分布式锁 ==========

async def acquire_lock(name: str, timeout: int, blocking_timeout: Optional[float] = None):
    """
    获取命名分布式锁

    参数:
        name: 锁名称（完整key）
        timeout: 锁自动过期时间（秒），防止持有者异常退出后死锁
        blocking_timeout: 等待获取锁的最长时间（秒），为0时不等待

    返回:
        获取成功返回Lock；Redis不可用时返回DummyLock（降级为不加锁）；
        锁被他人持有且等待超时返回None
    """
    lock = Lock(get_redis(), name, timeout=timeout, blocking_timeout=blocking_timeout)
    try:
        acquired = await lock.acquire(blocking=blocking_timeout != 0)
    except (RedisError, OSError) as e:
        logger.warning(f"Redis不可用，锁降级为不加锁: name={name}, error={str(e)}")
        return DummyLock()

    if not acquired:
        return None
    return lock


async def release_lock(lock) -> None:
    """
    释放acquire_lock返回的锁，锁已过期或Redis断开时只记录日志

    参数:
        lock: Lock或DummyLock
    """
    try:
        await lock.release()
    except (RedisError, OSError) as e:
        logger.warning(f"释放锁失败: {str(e)}")
