"""订单标记校正本地执行脚本

用法: python -m order_notes.jobs.reconcile_flags --batch-size 500 --dry-run
"""

import argparse
import logging
from order_notes.db.session import SessionLocal
from order_notes.services.note_service import NoteService
from order_notes.services.note_store import NoteStore

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_reconcile(batch_size: int = 500, dry_run: bool = False) -> int:
    """执行订单标记校正

    Args:
        batch_size: 批处理大小
        dry_run: 是否为试运行模式（只统计不修改）
    """
    db = SessionLocal()
    try:
        service = NoteService(NoteStore(db))
        count = service.reconcile_order_flags(batch_size, dry_run=dry_run)
        if dry_run:
            logger.info(f"试运行模式：发现 {count} 条笔记的订单标记与内容不一致")
        else:
            logger.info(f"校正完成：修正了 {count} 条笔记的订单标记")
        return count
    except Exception as e:
        logger.error(f"校正执行失败: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


def main(argv=None):
    """主函数"""
    parser = argparse.ArgumentParser(description='笔记订单标记校正工具')
    parser.add_argument(
        '--batch-size',
        type=int,
        default=500,
        help='批处理大小 (默认: 500)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='试运行模式，只统计不修改'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='详细输出模式'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        result = run_reconcile(args.batch_size, args.dry_run)
        if args.dry_run:
            print(f"📊 试运行结果：发现 {result} 条不一致记录")
        else:
            print(f"✅ 校正完成：处理了 {result} 条记录")
    except Exception as e:
        print(f"❌ 执行失败: {str(e)}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
