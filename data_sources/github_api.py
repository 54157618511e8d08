import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from .base import DataSource
from models import CommitRecord
from config import GlobalConfig
from errors import ConfigurationError, GitHubAPIError

logger = logging.getLogger(__name__)

GITHUB_URL_PREFIX = "https://github.com/"


def parse_github_url(repo_url: str) -> Tuple[str, str]:
    """
    从 URL 中解析 (owner, repo)。
    不做任何校验：格式错误的输入会得到错误的 owner/repo，在网络请求时才会失败。
    """
    logger.debug(f"解析 GitHub URL: {repo_url}")
    parts = repo_url.replace(GITHUB_URL_PREFIX, "").rstrip("/").split("/")
    owner = parts[-2] if len(parts) >= 2 else ""
    repo = parts[-1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    return owner, repo


def is_valid_github_url(repo_url: str) -> bool:
    """
    (V5.0) CLI 使用的前置校验：github.com 且路径恰好为 owner/repo (可带 .git 或末尾 '/')。
    /tree/main 之类的子路径会被拒绝，否则 parse_github_url 会解析出错误的仓库。
    """
    try:
        parsed = urlparse(repo_url)
    except ValueError:
        return False
    if parsed.hostname != "github.com":
        return False
    segments = [s for s in parsed.path.split("/") if s]
    return len(segments) == 2 and segments[1] != ".git"


def format_github_timestamp(value: datetime) -> str:
    """datetime -> 'YYYY-MM-DDTHH:MM:SSZ' (UTC)，naive 视为 UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubAPIDataSource(DataSource):
    """
    [V5.0] GitHub REST 数据源实现
    - 逐页拉取提交列表 (Link: rel="next" 翻页)
    - 每页内的提交详情通过有界线程池并发获取
    - 不做重试，任何请求失败都会中止整个拉取
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        session: Optional[requests.Session] = None,
    ):
        self.global_config = global_config

        token = self.global_config.GITHUB_TOKEN
        if not token:
            logger.error("❌ 未配置 GITHUB_PAT，无法访问 GitHub API。请检查您的 .env 文件。")
            raise ConfigurationError("GitHub token not configured (set GITHUB_PAT)")

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "Authorization": f"token {token}",
            }
        )
        logger.info(
            f"✅ GitHubAPIDataSource 已初始化 (并发上限: {self.global_config.DETAIL_FETCH_WORKERS})"
        )

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None):
        """发起一次 GET，非 2xx 转换为带分类的 GitHubAPIError"""
        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.global_config.REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"❌ GitHub 请求网络错误 ({url}): {e}")
            raise GitHubAPIError(
                f"GitHub API request failed: {e}", reason=GitHubAPIError.NETWORK
            ) from e

        if not response.ok:
            detail = ""
            try:
                detail = (response.json() or {}).get("message", "")
            except ValueError:
                detail = (response.text or "")[:200]
            logger.error(f"❌ GitHub API 错误: {response.status_code} {detail} ({url})")
            raise GitHubAPIError.from_status(response.status_code, detail)
        return response

    def _fetch_commit_detail(self, commit_url: str) -> CommitRecord:
        return CommitRecord.from_api(self._get(commit_url).json())

    def _fetch_commit_details(self, commit_urls: List[str]) -> List[CommitRecord]:
        """并发获取一页提交的详情，结果保持列表顺序"""
        if not commit_urls:
            return []
        workers = max(1, min(self.global_config.DETAIL_FETCH_WORKERS, len(commit_urls)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._fetch_commit_detail, commit_urls))

    def fetch_commits(
        self, owner: str, repo: str, start: datetime, end: datetime
    ) -> List[CommitRecord]:
        cfg = self.global_config
        url = f"{cfg.GITHUB_API_BASE_URL}/repos/{owner}/{repo}/commits"
        params = {
            "since": format_github_timestamp(start),
            "until": format_github_timestamp(end),
            "per_page": cfg.GITHUB_PER_PAGE,
        }
        logger.info(f"📅 获取提交记录 {owner}/{repo} ({params['since']} ~ {params['until']})")

        all_commits: List[CommitRecord] = []
        page = 1
        has_next = True

        while has_next and len(all_commits) < cfg.MAX_TOTAL_COMMITS:
            response = self._get(url, params={**params, "page": page})
            listed = response.json() or []

            # 不为超出上限的提交请求详情
            remaining = cfg.MAX_TOTAL_COMMITS - len(all_commits)
            commit_urls = [item["url"] for item in listed[:remaining]]
            all_commits.extend(self._fetch_commit_details(commit_urls))

            has_next = "next" in (response.links or {})
            logger.info(f"📄 已获取第 {page} 页，累计提交: {len(all_commits)}")
            page += 1

            if has_next and len(all_commits) < cfg.MAX_TOTAL_COMMITS:
                time.sleep(cfg.PAGE_DELAY_SECONDS)

        if len(all_commits) >= cfg.MAX_TOTAL_COMMITS:
            logger.warning(f"⚠️ 达到提交数上限 ({cfg.MAX_TOTAL_COMMITS})，停止获取。")
        return all_commits
