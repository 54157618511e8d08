"""
[V5.0] 结构化错误类型
在收到上游响应的位置设置 status_code 与 kind，调用方无需再做字符串匹配。
"""
from typing import Optional


class ChangelogError(Exception):
    """所有 changelog 流水线错误的基类"""

    kind = "general_error"
    hint = "Failed to generate changelog."

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConfigurationError(ChangelogError):
    """缺少 Token / 未启用任何可用供应商等，在任何网络请求之前失败"""

    kind = "configuration_error"
    hint = "Check your configuration (.env / environment variables)."


class UpstreamAPIError(ChangelogError):
    """GitHub 或供应商 API 返回非 2xx，或网络层失败"""

    kind = "upstream_api_error"
    hint = "The upstream service failed. Try again later."


class GitHubAPIError(UpstreamAPIError):
    """
    GitHub API 错误，reason 区分:
    - rate_limit_or_auth: 401/403/429
    - not_found: 404 (仓库不存在或无权访问私有仓库)
    - network: 连接/超时
    - other: 其他非 2xx
    """

    kind = "github_api_error"

    RATE_LIMIT_OR_AUTH = "rate_limit_or_auth"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    OTHER = "other"

    _HINTS = {
        RATE_LIMIT_OR_AUTH: "Check GITHUB_PAT, or wait for the rate limit to reset.",
        NOT_FOUND: "Check the repository name and that the token can access it.",
        NETWORK: "GitHub could not be reached. Try again later.",
        OTHER: "GitHub returned an unexpected error. Try again later.",
    }

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: str = OTHER,
    ):
        super().__init__(message, status_code)
        self.reason = reason
        self.hint = self._HINTS.get(reason, UpstreamAPIError.hint)

    @classmethod
    def from_status(cls, status_code: int, detail: str = "") -> "GitHubAPIError":
        """根据 HTTP 状态码构造带分类的错误"""
        suffix = f" ({detail})" if detail else ""
        if status_code in (401, 403, 429):
            return cls(
                f"GitHub API rate limit exceeded or authentication failed{suffix}",
                status_code,
                cls.RATE_LIMIT_OR_AUTH,
            )
        if status_code == 404:
            return cls(
                f"Repository not found or private repository access denied{suffix}",
                status_code,
                cls.NOT_FOUND,
            )
        return cls(
            f"GitHub API request failed with status {status_code}{suffix}",
            status_code,
            cls.OTHER,
        )


class ProviderAPIError(UpstreamAPIError):
    """文本生成供应商调用失败"""

    kind = "provider_api_error"


class EmptyResponseError(ChangelogError):
    """供应商调用成功但没有返回可用内容"""

    kind = "empty_result_error"
    hint = "The provider returned nothing. Try again later."


class PublishError(ChangelogError):
    """发布失败。仅在发布器内部使用，永远不会传播给调用方。"""

    kind = "publish_error"
