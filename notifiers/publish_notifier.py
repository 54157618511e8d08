import logging
from typing import Any, Dict, Optional

import requests

from .base import BaseNotifier
from context import RunContext
from errors import PublishError

logger = logging.getLogger(__name__)


class PublishNotifier(BaseNotifier):
    """
    [V5.0] 发布到 Gramaphone (POST {base}/api/changelogs)
    发布只是建议性的：任何失败只记录日志，不影响 changelog 返回给用户。
    """

    def __init__(self, context: RunContext, session: Optional[requests.Session] = None):
        super().__init__(context)
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "Gramaphone (Publish)"

    def is_enabled(self) -> bool:
        has_target = bool(self.global_config.PUBLISH_BASE_URL)
        wants_publish = self.context.publish or self.global_config.SHOULD_PUBLISH
        return has_target and wants_publish

    def _build_payload(self, content: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "repoUrl": self.context.repo_url,
            "content": content,
            "metadata": {
                "generatedAt": metadata.get("generatedAt"),
                "period": metadata.get("period"),
            },
        }

    def _post(self, content: str, metadata: Dict[str, Any]) -> None:
        url = f"{self.global_config.PUBLISH_BASE_URL.rstrip('/')}/api/changelogs"
        logger.info(f"📤 [Publish] 正在发布至: {url}")
        try:
            resp = self.session.post(
                url,
                json=self._build_payload(content, metadata),
                timeout=self.global_config.PUBLISH_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise PublishError(f"Failed to publish to Gramaphone: {e}") from e

        if not resp.ok:
            raise PublishError(
                f"Failed to publish to Gramaphone: {resp.text[:200]}",
                status_code=resp.status_code,
            )

    def send(self, content: str, metadata: Dict[str, Any]) -> bool:
        try:
            self._post(content, metadata)
        except PublishError as e:
            logger.error(f"❌ [Publish] 发布失败 ({e.status_code}): {e}")
            return False
        logger.info("✅ [Publish] 发布成功。")
        return True
