"""
[V5.0] Diff 聚合与截断
- aggregate_commits: 提交列表 -> DiffSummary (统计 + 逐文件 diff 块)
- truncate_diffs: 三级递减截断，使发送给 LLM 的文本不超过字符预算
"""
import logging
from datetime import datetime
from typing import Iterable, List, Sequence

from models import CommitRecord, DiffSummary

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"
HEADER_LINES = 3
TRUNCATED_MARKER = "\n... (truncated)"


def format_diff_block(commit: CommitRecord, filename: str, patch: str) -> str:
    """单个文件的 diff 块：SHA/时间、提交信息、文件名、patch"""
    return (
        f"Commit: {commit.short_sha} - {commit.date.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"Message: {commit.message}\n"
        f"File: {filename}\n"
        f"{patch}"
    )


def aggregate_commits(
    commits: Iterable[CommitRecord],
    start: datetime,
    end: datetime,
    max_total_commits: int,
) -> DiffSummary:
    """
    累加统计并按 (提交顺序, 文件顺序) 生成 diff 块。
    没有 patch 的文件 (二进制/过大) 只计入统计，不产生 diff 块。
    """
    additions = 0
    deletions = 0
    total_commits = 0
    diffs: List[str] = []

    for commit in commits:
        total_commits += 1
        additions += commit.additions
        deletions += commit.deletions
        for f in commit.files:
            if f.patch:
                diffs.append(format_diff_block(commit, f.filename, f.patch))

    summary = DiffSummary(
        additions=additions,
        deletions=deletions,
        net_diff=additions - deletions,
        diffs=tuple(diffs),
        total_commits=total_commits,
        has_more=total_commits >= max_total_commits,
        period_start=start,
        period_end=end,
    )
    logger.info(
        f"📊 Diff 汇总: 提交 {summary.total_commits}, +{summary.additions} "
        f"-{summary.deletions} (净变化 {summary.net_diff}), has_more={summary.has_more}"
    )
    return summary


def _shorten_block(diff: str, excerpt_chars: int) -> str:
    """保留前三行 (SHA/时间、信息、文件)，其余内容只保留前 excerpt_chars 个字符"""
    lines = diff.split("\n")
    header = "\n".join(lines[:HEADER_LINES])
    content = "\n".join(lines[HEADER_LINES:])
    shortened = f"{header}\n{content[:excerpt_chars]}"
    if len(content) > excerpt_chars:
        shortened += TRUNCATED_MARKER
    return shortened


def _omitted_line(count: int) -> str:
    return f"... ({count} more changes)"


def truncate_diffs(
    diffs: Sequence[str],
    max_length: int,
    excerpt_chars: int = 200,
    block_budget: int = 400,
) -> str:
    """
    三级截断，每一级只在上一级结果仍超出 max_length 时才生效：
    1. 原文拼接后未超限 -> 原样返回
    2. 每个块只保留头部三行 + 内容摘录
    3. 只保留前 max_length // block_budget 个块 (必要时更少)，末尾追加省略数量
    始终保留靠前的块，不重排。
    """
    full_text = BLOCK_SEPARATOR.join(diffs)
    if len(full_text) <= max_length:
        return full_text

    logger.info(
        f"✂️ 截断 Diff 文本: 原始 {len(full_text)} 字符 > 上限 {max_length} ({len(diffs)} 个块)"
    )

    shortened = [_shorten_block(d, excerpt_chars) for d in diffs]
    result = BLOCK_SEPARATOR.join(shortened)
    if len(result) <= max_length:
        return result

    keep = min(len(shortened), max(0, max_length // block_budget))
    while True:
        omitted = _omitted_line(len(diffs) - keep)
        if keep == 0:
            result = omitted
            break
        result = BLOCK_SEPARATOR.join(shortened[:keep]) + BLOCK_SEPARATOR + omitted
        if len(result) <= max_length:
            break
        keep -= 1

    if len(result) > max_length:
        # 预算连省略行都放不下
        result = result[:max_length]

    logger.info(f"✂️ 仅保留前 {keep}/{len(diffs)} 个块 ({len(result)} 字符)")
    return result
