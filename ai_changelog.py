"""
[V5.0] 供应商选择与 AI 服务
- select_provider_id: (仓库, 开关) -> 供应商 id 的纯函数决策表
- get_llm_provider: 基于注册表的工厂
- AIService: 调用供应商并追加署名
"""
import logging
import os
import importlib
from typing import Optional

from config import GlobalConfig
from errors import ConfigurationError
from models import DiffSummary

# (V4.1) 导入 Registry 和基类
from llm.provider_abc import LLMProvider, PROVIDER_REGISTRY

logger = logging.getLogger(__name__)


# --- (V4.1) 动态加载器 ---
def load_providers_dynamically(script_base_path: str):
    """
    (V4.1) 扫描 llm/ 目录下的所有 .py 文件并导入它们。
    这将触发 @register_provider 装饰器，将类注册到 PROVIDER_REGISTRY 中。
    """
    llm_dir = os.path.join(script_base_path, "llm")
    if not os.path.exists(llm_dir):
        logger.warning(f"⚠️ 未找到 llm 目录: {llm_dir}")
        return

    for filename in sorted(os.listdir(llm_dir)):
        if (
            filename.endswith(".py")
            and filename != "__init__.py"
            and filename != "provider_abc.py"
        ):
            # 构建模块名 (例如: llm.openai_provider)
            module_name = f"llm.{filename[:-3]}"
            try:
                importlib.import_module(module_name)
            except Exception as e:
                logger.error(f"❌ 动态加载模块 {module_name} 失败: {e}")


def select_provider_id(
    global_config: GlobalConfig, repo_name: str, requested: Optional[str] = None
) -> str:
    """
    (V5.0) 供应商决策表 (不触发任何网络请求)：
    1. 显式指定 (--llm / --no-ai) 优先
    2. 仓库在 Greptile 索引名单中且 Greptile 已启用 -> greptile
    3. OpenAI 已启用 -> openai
    4. 仅启用了 Greptile 但仓库不在名单中 -> ConfigurationError
    5. 都未启用 -> mock (LLM_FALLBACK_TO_MOCK) 或 ConfigurationError
    """
    if requested:
        return requested.lower()

    greptile_enabled = global_config.is_provider_enabled("greptile")
    if greptile_enabled and global_config.is_greptile_repository(repo_name):
        return "greptile"
    if global_config.is_provider_enabled("openai"):
        return "openai"
    if greptile_enabled:
        raise ConfigurationError(
            f"Greptile has no index for '{repo_name}' "
            f"(indexed: {', '.join(global_config.GREPTILE_REPOSITORIES)}); "
            "set ENABLE_OPENAI=true to handle other repositories"
        )
    if global_config.LLM_FALLBACK_TO_MOCK:
        return "mock"
    raise ConfigurationError(
        "No LLM provider enabled: set ENABLE_OPENAI=true or ENABLE_GREPTILE=true"
    )


# --- (V4.1) 工厂函数 ---
def get_llm_provider(provider_id: str, global_config: GlobalConfig) -> LLMProvider:
    """
    (V4.1) 工厂函数：基于 Registry Pattern 实现。
    不再使用硬编码的 if/elif，而是从 PROVIDER_REGISTRY 查找。
    """
    logger.info(f"ℹ️ 正在初始化 LLM 供应商: {provider_id}")

    # 1. 动态加载所有可能的 providers
    load_providers_dynamically(global_config.SCRIPT_BASE_PATH)

    # 2. 从注册表中查找
    if provider_id not in PROVIDER_REGISTRY:
        logger.error(f"❌ 未知的 LLM 供应商: '{provider_id}'")
        logger.error(f"   可用供应商: {list(PROVIDER_REGISTRY.keys())}")
        raise ConfigurationError(f"Unknown LLM provider: {provider_id}")

    # 3. 检查配置
    if not global_config.is_provider_configured(provider_id):
        logger.error(f"❌ 供应商 '{provider_id}' 未配置 API Key。")
        raise ConfigurationError(
            f"Provider '{provider_id}' is not configured; "
            "set its API key in your .env file"
        )

    # 4. 实例化
    return PROVIDER_REGISTRY[provider_id](global_config)


class AIService:
    """
    (V5.0) 封装对 LLM 的调用。
    供应商在构造时一次性确定，配置错误在任何网络请求之前暴露。
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        repo_name: str,
        requested: Optional[str] = None,
        provider: Optional[LLMProvider] = None,
    ):
        self.global_config = global_config
        self.repo_name = repo_name
        if provider is None:
            provider_id = select_provider_id(global_config, repo_name, requested)
            provider = get_llm_provider(provider_id, global_config)
        self.provider: LLMProvider = provider
        logger.info(
            f"✅ 🤖 AI 服务已成功初始化 (Provider: {self.provider.__class__.__name__})"
        )

    def generate(self, diff_text: str, summary: DiffSummary) -> str:
        """生成 changelog 正文，按配置追加供应商署名"""
        content = self.provider.generate_changelog(diff_text, summary, self.repo_name)
        if self.global_config.APPEND_PROVIDER_ATTRIBUTION and self.provider.display_name:
            content += f"\n\n---\n_Generated with {self.provider.display_name}_"
        return content
