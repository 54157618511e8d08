"""
[V3.5] 所有 LLM 供应商的抽象基类 (ABC)。
[V4.1] 新增 Registry Pattern 支持，允许动态注册供应商。
[V5.0] 接口收敛为 generate_changelog，提示词模板按供应商目录加载。
"""
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from models import DiffSummary

logger = logging.getLogger(__name__)

PROMPTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "prompts")

# --- [V4.1] 注册表机制 START ---
# 全局注册表，存储 "provider_id" -> Provider Class 的映射
PROVIDER_REGISTRY: Dict[str, Type["LLMProvider"]] = {}


def register_provider(provider_id: str):
    """
    类装饰器：用于将具体的 Provider 实现类注册到全局注册表中。

    使用示例:
        @register_provider("openai")
        class OpenAIProvider(LLMProvider):
            ...
    """

    def decorator(cls):
        if provider_id in PROVIDER_REGISTRY:
            raise ValueError(
                f"Provider id '{provider_id}' 已经被注册过 ({PROVIDER_REGISTRY[provider_id].__name__})"
            )
        cls.provider_id = provider_id
        PROVIDER_REGISTRY[provider_id] = cls
        return cls

    return decorator


# --- [V4.1] 注册表机制 END ---


def load_prompts_from_dir(prompt_dir: str) -> Dict[str, str]:
    """(V3.6) 辅助函数：递归加载所有 .txt 模板，key 为相对路径 (不含扩展名)"""
    prompts = {}
    for root, _, files in os.walk(prompt_dir):
        for filename in files:
            if filename.endswith(".txt"):
                file_path = os.path.join(root, filename)
                relative_path = os.path.relpath(file_path, prompt_dir)
                key = os.path.splitext(relative_path)[0]
                key = key.replace(os.path.sep, "/")  # 确保使用 /

                with open(file_path, "r", encoding="utf-8") as f:
                    prompts[key] = f.read()

    if not prompts:
        logger.warning(f"⚠️ 在 {prompt_dir} 及其子目录中未找到 .txt 提示词。")
    return prompts


class LLMProvider(ABC):
    """
    (V5.0 接口) LLM 供应商的抽象接口。
    """

    provider_id: str = ""
    # 用于 changelog 末尾的署名，None 表示不署名
    display_name: Optional[str] = None

    @abstractmethod
    def generate_changelog(
        self, diff_text: str, summary: DiffSummary, repo_name: str
    ) -> str:
        """
        (V5.0) 根据截断后的 diff 文本生成 changelog。
        返回空内容时应抛出 EmptyResponseError，而不是返回空字符串。
        """
        pass
