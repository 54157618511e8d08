"""
[V5.0] 业务逻辑编排器
fetch -> aggregate -> truncate -> (警告) -> LLM -> (署名) -> 发布
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from context import RunContext
from models import DiffSummary
from ai_changelog import AIService
from diff_processor import aggregate_commits, truncate_diffs
from data_sources.base import DataSource
from data_sources.factory import get_data_source
from data_sources.github_api import parse_github_url
from notifiers.base import BaseNotifier
from notifiers.factory import get_active_notifiers

logger = logging.getLogger(__name__)


def build_warning_message(max_total_commits: int) -> str:
    return (
        f"⚠️ Note: This changelog only includes the first {max_total_commits} commits "
        "due to GitHub API limitations.\n"
        "The actual number of changes during this period may be larger.\n\n"
    )


class ChangelogOrchestrator:
    """
    (V5.0) 负责执行 changelog 生成的核心业务逻辑。
    任一阶段失败都会中止整个请求；只有发布失败会被吞掉。
    """

    def __init__(
        self,
        context: RunContext,
        data_source: Optional[DataSource] = None,
        ai_service: Optional[AIService] = None,
        notifiers: Optional[List[BaseNotifier]] = None,
    ):
        self.context = context
        self.global_config = context.global_config

        self.owner, self.repo = parse_github_url(context.repo_url)
        self.repo_name = f"{self.owner}/{self.repo}"

        # 配置类错误在任何网络请求之前暴露
        requested = "mock" if context.no_ai else context.llm_id
        self.ai_service = ai_service or AIService(
            self.global_config, self.repo_name, requested=requested
        )
        self.data_source = data_source or get_data_source(context)
        self.notifiers = (
            notifiers if notifiers is not None else get_active_notifiers(context)
        )

        logger.info(
            f"✅ ChangelogOrchestrator 已初始化 ({self.repo_name}, "
            f"Provider: {self.ai_service.provider.__class__.__name__})"
        )

    def get_repo_diff(self) -> DiffSummary:
        """拉取提交并聚合为 DiffSummary"""
        commits = self.data_source.fetch_commits(
            self.owner, self.repo, self.context.start_date, self.context.end_date
        )
        return aggregate_commits(
            commits,
            self.context.start_date,
            self.context.end_date,
            self.global_config.MAX_TOTAL_COMMITS,
        )

    def run(self) -> str:
        """
        (V5.0) 执行核心业务流程，返回最终 changelog 文本。
        """
        logger.info(
            f"🚀 开始生成 changelog: {self.context.repo_url} "
            f"({self.context.start_date.isoformat()} ~ {self.context.end_date.isoformat()})"
        )

        # --- 1. 获取并聚合 ---
        summary = self.get_repo_diff()

        # --- 2. 截断 ---
        cfg = self.global_config
        truncated_diff_text = truncate_diffs(
            summary.diffs,
            cfg.max_diff_length,
            excerpt_chars=cfg.TRUNCATE_EXCERPT_CHARS,
            block_budget=cfg.TRUNCATE_BLOCK_BUDGET,
        )
        logger.debug(
            f"Diff 文本: 原始 {len(summary.full_text)} 字符, 截断后 {len(truncated_diff_text)} 字符"
        )

        # --- 3. 警告 ---
        warning_message = ""
        if summary.has_more:
            warning_message = build_warning_message(cfg.MAX_TOTAL_COMMITS)

        # --- 4. LLM ---
        changelog_content = self.ai_service.generate(truncated_diff_text, summary)
        changelog = warning_message + changelog_content
        logger.info(f"✅ Changelog 生成完毕 ({len(changelog)} 字符)")

        # --- 5. 发布 (尽力而为) ---
        self._handle_notifications(changelog, summary)
        return changelog

    def build_metadata(self, summary: Optional[DiffSummary] = None) -> Dict[str, Any]:
        start = summary.period_start if summary else self.context.start_date
        end = summary.period_end if summary else self.context.end_date
        return {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "repo": self.context.repo_url,
            "period": {"start": start.isoformat(), "end": end.isoformat()},
        }

    def _handle_notifications(self, changelog: str, summary: DiffSummary):
        if not self.notifiers:
            return
        metadata = self.build_metadata(summary)
        for notifier in self.notifiers:
            try:
                notifier.send(changelog, metadata)
            except Exception as e:
                logger.error(f"❌ 通知渠道 {notifier.name} 发送失败: {e}")
