from typing import List, Type
import logging
from context import RunContext
from .base import BaseNotifier
from .publish_notifier import PublishNotifier

# 下游发布渠道 (按顺序调用)
AVAILABLE_NOTIFIERS_CLASSES: List[Type[BaseNotifier]] = [
    PublishNotifier,
]

logger = logging.getLogger(__name__)


def get_active_notifiers(context: RunContext) -> List[BaseNotifier]:
    """
    [V5.0] 返回本次运行需要调用的发布渠道。
    构造失败的渠道只记录日志并跳过，不影响 changelog 生成。
    """
    active: List[BaseNotifier] = []
    for notifier_cls in AVAILABLE_NOTIFIERS_CLASSES:
        try:
            notifier = notifier_cls(context)
        except Exception as e:
            logger.error(f"⚠️ 发布渠道 {notifier_cls.__name__} 初始化失败: {e}")
            continue

        if notifier.is_enabled():
            logger.info(f"🔌 已启用发布渠道: {notifier.name}")
            active.append(notifier)
        else:
            logger.debug(f"发布渠道 {notifier.name} 未启用 (未配置地址或未请求发布)")

    return active
