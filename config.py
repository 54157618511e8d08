"""
[V5.0] 全局配置
- 从 .env / 环境变量一次性读取，之后通过 RunContext 显式传递
- [V5.0] GitHub 拉取参数、截断预算、供应商开关、发布地址
"""
import os
from typing import List

from dotenv import load_dotenv


# --- 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))
env_path = os.path.join(SCRIPT_BASE_PATH, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)
else:
    load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    """将 'true'/'1'/'yes' 等环境变量解析为布尔值"""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    """逗号分隔的环境变量 -> 列表 (忽略空项)"""
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class GlobalConfig:
    """
    (V5.0) Changelog 生成器的全局应用配置。
    测试中可以直接覆盖实例属性。
    """

    # --- 路径配置 ---
    SCRIPT_BASE_PATH: str = SCRIPT_BASE_PATH
    LOG_DIR: str = os.getenv("LOG_DIR", os.path.join(SCRIPT_BASE_PATH, "logs"))
    LOG_TO_FILE: bool = _env_flag("LOG_TO_FILE", "true")
    DEBUG_LOG_FILE: str = "changelog-debug.log"
    ERROR_LOG_FILE: str = "changelog-error.log"

    # =================================================================
    # --- GitHub API ---
    # =================================================================
    GITHUB_TOKEN: str = os.getenv("GITHUB_PAT") or os.getenv("GITHUB_TOKEN", "")
    GITHUB_API_BASE_URL: str = "https://api.github.com"
    GITHUB_PER_PAGE: int = 100
    MAX_TOTAL_COMMITS: int = 3000
    PAGE_DELAY_SECONDS: float = 0.1
    DETAIL_FETCH_WORKERS: int = int(os.getenv("DETAIL_FETCH_WORKERS", "10"))
    REQUEST_TIMEOUT_SECONDS: int = 30

    # =================================================================
    # --- Diff 截断预算 ---
    # =================================================================
    MAX_TOKENS: int = int(os.getenv("MAX_TOKENS", "6000"))
    # 粗略估算，不同供应商的 tokenizer 差异较大
    CHARS_PER_TOKEN: int = int(os.getenv("CHARS_PER_TOKEN", "4"))
    TRUNCATE_EXCERPT_CHARS: int = 200
    TRUNCATE_BLOCK_BUDGET: int = 400

    # =================================================================
    # --- AI 供应商配置 ---
    # =================================================================

    # 1. OpenAI (通用文本生成)
    ENABLE_OPENAI: bool = _env_flag("ENABLE_OPENAI")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "")
    DEFAULT_MODEL_OPENAI: str = os.getenv("OPENAI_MODEL", "gpt-4")
    OPENAI_TEMPERATURE: float = 0.7

    # 2. Greptile (仓库索引感知)
    ENABLE_GREPTILE: bool = _env_flag("ENABLE_GREPTILE")
    GREPTILE_API_KEY: str = os.getenv("GREPTILE_API_KEY", "")
    GREPTILE_API_URL: str = "https://api.greptile.com/v2/query"
    GREPTILE_BRANCH: str = "main"
    GREPTILE_GENIUS: bool = True
    # Greptile 仅对已建立索引的仓库有效
    GREPTILE_REPOSITORIES: List[str] = _env_list(
        "GREPTILE_REPOSITORIES",
        "marimo-team/marimo,microsoft/vscode,facebook/react",
    )

    # 3. 选择策略
    LLM_FALLBACK_TO_MOCK: bool = _env_flag("LLM_FALLBACK_TO_MOCK", "true")
    APPEND_PROVIDER_ATTRIBUTION: bool = _env_flag("APPEND_PROVIDER_ATTRIBUTION", "true")

    # =================================================================
    # --- 发布 (Gramaphone) 配置 ---
    # =================================================================
    PUBLISH_BASE_URL: str = os.getenv("GRAMAPHONE_URL", "")
    SHOULD_PUBLISH: bool = _env_flag("SHOULD_PUBLISH")
    PUBLISH_TIMEOUT_SECONDS: int = 10

    @property
    def max_diff_length(self) -> int:
        """截断上限 (字符) = token 预算 × 每 token 字符数"""
        return self.MAX_TOKENS * self.CHARS_PER_TOKEN

    def is_provider_enabled(self, provider: str) -> bool:
        """检查供应商开关 (ENABLE_*)。mock 总是可用。"""
        if provider == "openai":
            return self.ENABLE_OPENAI
        if provider == "greptile":
            return self.ENABLE_GREPTILE
        return provider == "mock"

    def is_provider_configured(self, provider: str) -> bool:
        """
        检查特定供应商是否已在环境中设置其 API 密钥。
        """
        if provider == "openai":
            return bool(self.OPENAI_API_KEY)
        if provider == "greptile":
            return bool(self.GREPTILE_API_KEY)
        return provider == "mock"

    def is_greptile_repository(self, repo_name: str) -> bool:
        return repo_name.lower() in {r.lower() for r in self.GREPTILE_REPOSITORIES}
