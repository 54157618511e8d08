"""
[V3.5] LLMProvider 针对 OpenAI 兼容接口的具体实现。
[V4.1] 使用 @register_provider 进行自动注册。
[V5.0] 改为通用 changelog 生成供应商。
"""
import logging
import os

from openai import OpenAI, APIConnectionError, APIStatusError, OpenAIError

# (V4.1) 导入注册装饰器
from llm.provider_abc import (
    LLMProvider,
    PROMPTS_DIR,
    load_prompts_from_dir,
    register_provider,
)
from config import GlobalConfig
from errors import ConfigurationError, EmptyResponseError, ProviderAPIError
from models import DiffSummary

logger = logging.getLogger(__name__)


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    """
    (V5.0) 通用文本生成供应商 (OpenAI Chat Completions)。
    """

    display_name = "OpenAI"

    def __init__(self, global_config: GlobalConfig):
        """
        初始化 OpenAI 客户端并加载 OpenAI 专用提示词。
        """
        self.global_config = global_config
        if not self.global_config.OPENAI_API_KEY:
            logger.error("❌ OPENAI_API_KEY 未设置。请检查您的 .env 文件。")
            raise ConfigurationError("OPENAI_API_KEY is not set")

        client_kwargs = {"api_key": self.global_config.OPENAI_API_KEY}
        if self.global_config.OPENAI_BASE_URL:
            client_kwargs["base_url"] = self.global_config.OPENAI_BASE_URL
        self.client = OpenAI(**client_kwargs)
        self.default_model = self.global_config.DEFAULT_MODEL_OPENAI

        self.prompts = load_prompts_from_dir(os.path.join(PROMPTS_DIR, "openai"))
        if "changelog" not in self.prompts:
            raise ConfigurationError("OpenAI changelog prompt template is missing")

        logger.info(
            f"✅ OpenAIProvider 初始化成功 (模型: {self.default_model}, 已加载 {len(self.prompts)} 个提示)"
        )

    def generate_changelog(
        self, diff_text: str, summary: DiffSummary, repo_name: str
    ) -> str:
        user_prompt = self.prompts["changelog"].format(
            repo_name=repo_name, diff_text=diff_text
        )
        logger.info(f"🤖 [OpenAIProvider] 正在生成 changelog ({len(user_prompt)} 字符)")
        try:
            response = self.client.chat.completions.create(
                model=self.default_model,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=self.global_config.OPENAI_TEMPERATURE,
            )
        except APIStatusError as e:
            logger.error(f"❌ [OpenAIProvider 错误] {e.status_code}: {e}")
            raise ProviderAPIError(
                f"OpenAI request failed: {e}", status_code=e.status_code
            ) from e
        except (APIConnectionError, OpenAIError) as e:
            logger.error(f"❌ [OpenAIProvider 错误] 请求失败: {e}")
            raise ProviderAPIError(f"OpenAI request failed: {e}") from e

        content = ""
        if response.choices:
            content = (response.choices[0].message.content or "").strip()
        # 只有空白字符也视为没有内容
        if not content:
            raise EmptyResponseError("No content received from OpenAI")
        return content
