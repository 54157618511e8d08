from abc import ABC, abstractmethod
from typing import Any, Dict
from context import RunContext
import logging

logger = logging.getLogger(__name__)


class BaseNotifier(ABC):
    """
    [V4.3] 通知渠道抽象基类
    [V5.0] 用于把生成好的 changelog 推送到下游服务 (尽力而为)。
    """

    def __init__(self, context: RunContext):
        """
        初始化通知器，接收运行时上下文。
        """
        self.context = context
        self.global_config = context.global_config

    @property
    @abstractmethod
    def name(self) -> str:
        """返回通知渠道的名称 (日志显示用)"""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        判断此通知器是否应该激活。
        例如：PublishNotifier 检查是否配置了发布地址且本次运行要求发布。
        """
        pass

    @abstractmethod
    def send(self, content: str, metadata: Dict[str, Any]) -> bool:
        """
        执行发送逻辑。失败时记录日志并返回 False，不抛出异常。
        :param content: changelog 正文
        :param metadata: generatedAt / period 等元数据
        :return: 是否发送成功
        """
        pass
