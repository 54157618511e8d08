"""
[V5.0] 未启用任何 LLM 时使用的预览供应商
不进行任何网络调用，只把原始统计数据和 diff 样例拼成模板文本。
"""
import logging
from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig
from models import DiffSummary

logger = logging.getLogger(__name__)

SAMPLE_CHARS = 1000


@register_provider("mock")
class MockProvider(LLMProvider):
    """
    模拟的 Provider，返回 "LLM DISABLED" 预览 changelog。
    """

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        logger.info("✅ MockProvider 已初始化 (无需 API Key)")

    def generate_changelog(
        self, diff_text: str, summary: DiffSummary, repo_name: str
    ) -> str:
        return (
            "LLM DISABLED - Sample Changelog\n"
            "\n"
            f"Changes between {summary.period_start.strftime('%Y-%m-%d')} "
            f"and {summary.period_end.strftime('%Y-%m-%d')}:\n"
            "\n"
            "Total Changes:\n"
            f"- {summary.additions} additions\n"
            f"- {summary.deletions} deletions\n"
            f"- Net change: {summary.net_diff} lines\n"
            f"- Total commits analyzed: {summary.total_commits}\n"
            "\n"
            "Sample of changes:\n"
            f"{diff_text[:SAMPLE_CHARS]}...\n"
            "\n"
            "Note: This is a preview. Enable an LLM by setting either "
            "ENABLE_GREPTILE=true or ENABLE_OPENAI=true in your environment."
        )
