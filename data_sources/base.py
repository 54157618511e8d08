from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from models import CommitRecord


class DataSource(ABC):
    """
    [V5.0] 数据源抽象基类
    定义了获取远程仓库提交数据的标准接口，测试中可替换为内存实现。
    """

    @abstractmethod
    def fetch_commits(
        self, owner: str, repo: str, start: datetime, end: datetime
    ) -> List[CommitRecord]:
        """
        获取时间窗口内的提交 (含 stats 和逐文件 patch)。
        按 API 返回顺序排列，达到提交数上限时截断。
        """
        pass
