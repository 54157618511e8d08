from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


def parse_github_datetime(value: str) -> datetime:
    """GitHub 的 ISO-8601 时间 ('...Z') -> UTC datetime"""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class CommitFile:
    """单个文件变更 (patch 对二进制或过大的文件为空)"""

    filename: str
    patch: Optional[str] = None


@dataclass(frozen=True)
class CommitRecord:
    """一次提交的完整数据 (来自 commit 详情接口)"""

    sha: str
    date: datetime
    message: str
    files: Tuple[CommitFile, ...]
    additions: int
    deletions: int
    total: int

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommitRecord":
        """从 GET /repos/{owner}/{repo}/commits/{sha} 的响应构造"""
        stats = data.get("stats") or {}
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        return cls(
            sha=data["sha"],
            date=parse_github_datetime(author["date"]),
            message=commit.get("message", ""),
            files=tuple(
                CommitFile(filename=f["filename"], patch=f.get("patch"))
                for f in data.get("files") or []
            ),
            additions=int(stats.get("additions", 0)),
            deletions=int(stats.get("deletions", 0)),
            total=int(stats.get("total", 0)),
        )


@dataclass(frozen=True)
class DiffSummary:
    """
    聚合结果。
    net_diff == additions - deletions；has_more 表示触达了提交数上限。
    """

    additions: int
    deletions: int
    net_diff: int
    diffs: Tuple[str, ...]
    total_commits: int
    has_more: bool
    period_start: datetime
    period_end: datetime

    @property
    def full_text(self) -> str:
        return "\n\n".join(self.diffs)
