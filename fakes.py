"""
测试用的 GitHub / HTTP 替身 (不发起任何网络请求)
"""
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config import GlobalConfig
from models import DiffSummary

API = "https://api.github.com"


def make_config(**overrides) -> GlobalConfig:
    """构造与环境变量无关的 GlobalConfig"""
    cfg = GlobalConfig()
    defaults = {
        "GITHUB_TOKEN": "ghp_test",
        "PAGE_DELAY_SECONDS": 0,
        "DETAIL_FETCH_WORKERS": 4,
        "ENABLE_OPENAI": False,
        "OPENAI_API_KEY": "",
        "ENABLE_GREPTILE": False,
        "GREPTILE_API_KEY": "",
        "GREPTILE_REPOSITORIES": ["facebook/react", "marimo-team/marimo"],
        "LLM_FALLBACK_TO_MOCK": True,
        "APPEND_PROVIDER_ATTRIBUTION": True,
        "PUBLISH_BASE_URL": "",
        "SHOULD_PUBLISH": False,
        "LOG_TO_FILE": False,
        "MAX_TOKENS": 6000,
        "CHARS_PER_TOKEN": 4,
    }
    defaults.update(overrides)
    for key, value in defaults.items():
        setattr(cfg, key, value)
    return cfg


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        status_code: int = 200,
        links: Optional[Dict[str, Any]] = None,
        text: str = "",
        reason: str = "",
    ):
        self._payload = payload
        self.status_code = status_code
        self.links = links or {}
        self.text = text
        self.reason = reason or ("OK" if status_code < 400 else "Error")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def make_commit_payload(
    index: int,
    files: Optional[List[Dict[str, Any]]] = None,
    additions: int = 3,
    deletions: int = 1,
    date: str = "2024-10-22T23:49:10Z",
    message: Optional[str] = None,
) -> Dict[str, Any]:
    sha = f"{index:07x}" + "a" * 33
    if files is None:
        files = [{"filename": f"src/file{index}.py", "patch": f"@@ -1 +1 @@\n-old {index}\n+new {index}"}]
    return {
        "sha": sha,
        "url": f"{API}/repos/facebook/react/commits/{sha}",
        "commit": {
            "message": message or f"Change number {index}",
            "author": {"date": date},
        },
        "stats": {
            "additions": additions,
            "deletions": deletions,
            "total": additions + deletions,
        },
        "files": files,
    }


class FakeGitHubSession:
    """
    模拟 GitHub REST：commits 列表按 per_page 分页，详情按 URL 返回。
    errors: {url: FakeResponse} 用于注入失败。
    """

    def __init__(self, commits: List[Dict[str, Any]], per_page: int = 100, errors=None):
        self.commits = commits
        self.per_page = per_page
        self.by_url = {c["url"]: c for c in commits}
        self.errors = errors or {}
        self.headers: Dict[str, str] = {}
        self.list_calls: List[Dict[str, Any]] = []
        self.detail_calls: List[str] = []
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        if url in self.errors:
            return self.errors[url]
        if url.endswith("/commits"):
            with self._lock:
                self.list_calls.append(dict(params or {}))
            page = params["page"]
            start = (page - 1) * self.per_page
            items = self.commits[start : start + self.per_page]
            links = {}
            if start + self.per_page < len(self.commits):
                links = {"next": {"url": f"{url}?page={page + 1}", "rel": "next"}}
            return FakeResponse([{"sha": c["sha"], "url": c["url"]} for c in items], links=links)
        with self._lock:
            self.detail_calls.append(url)
        return FakeResponse(self.by_url[url])


class FakePostSession:
    """记录 POST 调用并返回预设响应"""

    def __init__(self, response: FakeResponse = None, exc: Exception = None):
        self.response = response or FakeResponse({})
        self.exc = exc
        self.headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


def make_summary(**overrides) -> DiffSummary:
    values = {
        "additions": 12,
        "deletions": 5,
        "net_diff": 7,
        "diffs": ("Commit: abc1234 - 2024-10-22 23:49:10\nMessage: m\nFile: f\n+x",),
        "total_commits": 2,
        "has_more": False,
        "period_start": datetime(2024, 10, 1, tzinfo=timezone.utc),
        "period_end": datetime(2024, 10, 31, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return DiffSummary(**values)
