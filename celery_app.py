"""Celery 配置文件

笔记维护任务（订单标记校正）走独立的 maintenance 队列：
    celery -A celery_app worker -Q maintenance
"""

from celery import Celery

from order_notes.core.config import settings

app = Celery('notes_worker', include=['tasks.note_tasks'])

# broker 和 backend 使用与缓存不同的 Redis 库
app.conf.broker_url = settings.CELERY_BROKER_URL
app.conf.result_backend = settings.CELERY_RESULT_BACKEND

app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.result_expires = 24 * 3600

app.conf.timezone = 'Asia/Shanghai'
app.conf.enable_utc = True

app.conf.task_routes = {
    'tasks.notes.*': {'queue': 'maintenance'},
}

# 校正任务耗时较长，每次只预取一个，执行完成后再确认
app.conf.worker_prefetch_multiplier = 1
app.conf.task_acks_late = True

__all__ = ['app']
