"""
[V5.0] 命令行界面 (Interface) 层
负责参数解析、输入校验、组装 RunContext，并把结果输出为 markdown / raw / json。
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from config import GlobalConfig
from context import RunContext
from errors import ChangelogError
from orchestrator import ChangelogOrchestrator
from changelog_formatter import format_to_markdown
from data_sources.github_api import is_valid_github_url

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7


def setup_parser() -> argparse.ArgumentParser:
    """
    负责所有 argparse 的定义。
    """
    parser = argparse.ArgumentParser(
        description="GitHub Changelog 生成器 (V5.0)",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "-r",
        "--repo-url",
        type=str,
        required=True,
        help="GitHub 仓库地址 (例如 https://github.com/facebook/react)",
    )

    # --- 互斥参数组 ---
    range_group = parser.add_mutually_exclusive_group()
    range_group.add_argument(
        "-d",
        "--days",
        type=int,
        help=f"统计最近 N 天 (默认: {DEFAULT_DAYS})。\n(与 --since 互斥)",
    )
    range_group.add_argument(
        "--since",
        type=str,
        help="起始日期 (YYYY-MM-DD 或 ISO-8601，按 UTC 解释)",
    )
    parser.add_argument(
        "--until",
        type=str,
        default=None,
        help="结束日期 (YYYY-MM-DD 或 ISO-8601，默认: 现在)",
    )

    parser.add_argument(
        "--llm",
        type=str,
        default=None,
        help="(覆盖) 指定 LLM 供应商 ('openai', 'greptile', 'mock')。\n"
        "(默认: 按仓库与 ENABLE_* 开关自动选择)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["markdown", "raw", "json"],
        default="markdown",
        help="输出格式 (默认: markdown)",
    )
    parser.add_argument(
        "-o", "--output", type=str, default=None, help="写入文件而不是标准输出"
    )

    # --- 标志 (Flags) ---
    parser.add_argument("--no-ai", action="store_true", help="禁用 LLM，输出统计预览")
    parser.add_argument(
        "--publish", action="store_true", help="生成后发布到 GRAMAPHONE_URL"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 DEBUG 日志")

    return parser


def parse_date(value: str, end_of_day: bool = False) -> datetime:
    """
    'YYYY-MM-DD' 或 ISO-8601 -> UTC datetime。
    仅有日期的结束时间取当天 23:59:59。
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if len(value) == 10 and end_of_day:
        parsed = parsed.replace(hour=23, minute=59, second=59)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def resolve_date_range(
    days: Optional[int],
    since: Optional[str],
    until: Optional[str],
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    now = now or datetime.now(timezone.utc)
    end = min(parse_date(until, end_of_day=True), now) if until else now
    if since:
        start = parse_date(since)
    else:
        start = end - timedelta(days=days if days is not None else DEFAULT_DAYS)
    return start, end


def validate_inputs(repo_url: str, start: datetime, end: datetime) -> List[str]:
    """返回所有输入问题 (空列表表示通过)"""
    problems = []
    if not is_valid_github_url(repo_url):
        problems.append(f"Invalid GitHub repository URL: {repo_url}")
    if start > end:
        problems.append("Start date must not be after end date")
    if end > datetime.now(timezone.utc):
        problems.append("End date must not be in the future")
    return problems


def render_output(changelog: str, output_format: str, metadata: dict) -> str:
    if output_format == "raw":
        return changelog
    markdown_changelog = format_to_markdown(changelog)
    if output_format == "json":
        return json.dumps(
            {"changelog": markdown_changelog, "metadata": metadata},
            ensure_ascii=False,
            indent=2,
        )
    return markdown_changelog


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    主入口点，返回进程退出码。
    """

    # 1. 解析 Args
    parser = setup_parser()
    args = parser.parse_args(argv)
    global_config = GlobalConfig()

    # 2. 时间范围与输入校验
    try:
        start_date, end_date = resolve_date_range(args.days, args.since, args.until)
    except ValueError as e:
        logger.error(f"❌ 日期格式错误: {e}")
        return 2

    problems = validate_inputs(args.repo_url, start_date, end_date)
    if problems:
        for problem in problems:
            logger.error(f"❌ {problem}")
        return 2

    logger.info("=" * 50)
    logger.info("🚀 ChangeLog-AIGC 启动...")
    logger.info(f"   [目标仓库]: {args.repo_url}")
    logger.info(f"   [时间范围]: {start_date.isoformat()} ~ {end_date.isoformat()}")
    logger.info(f"   [LLM 供应商]: {'mock (--no-ai)' if args.no_ai else args.llm or '自动选择'}")
    logger.info("=" * 50)

    run_context = RunContext(
        repo_url=args.repo_url,
        start_date=start_date,
        end_date=end_date,
        llm_id=args.llm,
        no_ai=args.no_ai,
        publish=args.publish,
        global_config=global_config,
    )

    # 3. 运行 Orchestrator
    try:
        orchestrator = ChangelogOrchestrator(run_context)
        changelog = orchestrator.run()
    except ChangelogError as e:
        logger.error(f"❌ [{e.kind}] {e.message}")
        logger.error(f"   {e.hint}")
        return 1

    output = render_output(changelog, args.format, orchestrator.build_metadata())

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.info(f"✅ Changelog 已保存: {args.output}")
    else:
        print(output)
    return 0
