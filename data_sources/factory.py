import logging
from context import RunContext
from errors import ConfigurationError
from .base import DataSource
from .github_api import GitHubAPIDataSource

logger = logging.getLogger(__name__)


def get_data_source(context: RunContext) -> DataSource:
    """
    [V5.0] 数据源工厂
    目前仅支持 GitHub 远程仓库 (http/https URL 或 owner/repo 形式)。
    """
    path = context.repo_url.lower()

    if path.startswith("git@"):
        raise ConfigurationError(
            f"SSH remotes are not supported, use an https URL: {context.repo_url}"
        )

    logger.info("🔌 [Factory] 初始化数据源: GitHub API")
    return GitHubAPIDataSource(context.global_config)
