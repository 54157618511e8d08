"""
GitHub Changelog 生成器 (V5.0)
- cli.py: 负责命令行界面和配置组装
- context.py: 负责运行时配置模型
- orchestrator.py: 负责核心业务逻辑
- GitChangelog.py: 仅作为主入口启动器
"""

import logging
import sys

# utils 只依赖 config，可在业务模块之前导入
import utils

logger = logging.getLogger(__name__)


def main() -> int:
    utils.setup_logging(verbose="-v" in sys.argv or "--verbose" in sys.argv)
    try:
        # 延迟导入 cli 模块，确保日志已配置
        import cli

        return cli.run_cli()
    except Exception as e:
        # 捕获所有未处理的全局异常
        logger.error(f"❌ 发生未处理的全局异常: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
