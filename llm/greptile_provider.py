"""
[V5.0] LLMProvider 针对 Greptile 的具体实现。
Greptile 维护仓库索引，只适用于已建立索引的仓库 (见 GREPTILE_REPOSITORIES)。
"""
import logging
import os
from typing import Any, Dict, Optional

import requests

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


@register_provider("greptile")
class GreptileProvider(LLMProvider):
    """
    (V5.0) 仓库索引感知供应商。
    """

    display_name = "Greptile"

    def __init__(
        self,
        global_config: GlobalConfig,
        session: Optional[requests.Session] = None,
    ):
        self.global_config = global_config
        if not self.global_config.GREPTILE_API_KEY:
            logger.error("❌ GREPTILE_API_KEY 未设置。请检查您的 .env 文件。")
            raise ConfigurationError("GREPTILE_API_KEY is not set")

        self.session = session or requests.Session()
        self.prompts = load_prompts_from_dir(os.path.join(PROMPTS_DIR, "greptile"))
        if "changelog" not in self.prompts:
            raise ConfigurationError("Greptile changelog prompt template is missing")

        logger.info(f"✅ GreptileProvider 初始化成功 (已加载 {len(self.prompts)} 个提示)")

    def _build_payload(self, content: str, repo_name: str) -> Dict[str, Any]:
        return {
            "messages": [{"content": content, "role": "user"}],
            "repositories": [
                {
                    "remote": "github",
                    "repository": repo_name,
                    "branch": self.global_config.GREPTILE_BRANCH,
                }
            ],
            "genius": self.global_config.GREPTILE_GENIUS,
        }

    def generate_changelog(
        self, diff_text: str, summary: DiffSummary, repo_name: str
    ) -> str:
        content = self.prompts["changelog"].format(
            repo_name=repo_name, diff_text=diff_text
        )
        headers = {
            "Authorization": f"Bearer {self.global_config.GREPTILE_API_KEY}",
            "X-Github-Token": self.global_config.GITHUB_TOKEN,
            "Content-Type": "application/json",
        }
        logger.info(f"🤖 [GreptileProvider] 正在调用 Greptile API ({repo_name})")
        try:
            resp = self.session.post(
                self.global_config.GREPTILE_API_URL,
                headers=headers,
                json=self._build_payload(content, repo_name),
                timeout=self.global_config.REQUEST_TIMEOUT_SECONDS * 10,
            )
        except requests.RequestException as e:
            logger.error(f"❌ [GreptileProvider] 网络错误: {e}")
            raise ProviderAPIError(f"Greptile request failed: {e}") from e

        if not resp.ok:
            logger.error(f"❌ [GreptileProvider] API 错误: {resp.status_code} {resp.text[:200]}")
            raise ProviderAPIError(
                f"Failed to generate changelog: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json() or {}
        except ValueError as e:
            raise EmptyResponseError("No content received from Greptile") from e

        message = data.get("message")
        if not message or not message.strip():
            raise EmptyResponseError("No content received from Greptile")
        return message.strip()
