"""
[V5.0] 运行时配置的数据模型
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from config import GlobalConfig


@dataclass
class RunContext:
    """
    (V5.0) 封装一次 changelog 生成所需的所有配置和状态。
    这是从 CLI 传递到 Orchestrator 的唯一对象。
    """

    # --- 目标仓库 ---
    repo_url: str

    # --- 时间范围 ---
    start_date: datetime
    end_date: datetime

    # --- AI 参数 ---
    # None 表示按仓库与开关自动选择
    llm_id: Optional[str] = None
    no_ai: bool = False

    # --- 发布 ---
    publish: bool = False

    # --- 全局配置 ---
    # 包含所有 API 密钥、常量和 .env 加载的数据
    global_config: Optional[GlobalConfig] = None

    def __post_init__(self):
        if self.global_config is None:
            self.global_config = GlobalConfig()
