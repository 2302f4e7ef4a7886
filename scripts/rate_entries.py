"""
执行一轮情绪评分补齐的脚本，可由cron定时调用
"""
# 标准库导包
import asyncio
import logging
import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 项目内部导包
from config import settings
from llm.client import LLMClient
from redis_client import close_redis_pool
from routers.services.rating_backfill_service import run_backfill_once
from storage import init_db, cleanup_db, async_session_factory


async def main():
    """主函数"""
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    print(f"开始补齐最近 {settings.RATING_BACKFILL_WINDOW_DAYS} 天的情绪评分...")

    try:
        await init_db()
        report = await run_backfill_once(async_session_factory, LLMClient())
        if report is None:
            print("补齐任务正在其他进程中执行，本次跳过")
            return 0

        print(f"✓ 待评分 {report.selected} 条，成功 {report.rated} 条，跳过 {report.skipped} 条，失败 {report.failed} 条")
        if report.failed_entry_ids:
            print(f"  失败条目: {report.failed_entry_ids}")

    except Exception as e:
        print(f"✗ 补齐失败: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    finally:
        await cleanup_db()
        await close_redis_pool()

    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
