import logging
import sys
import os
from typing import Optional

from config import GlobalConfig


# 将日志配置移到这里，作为一个可被调用的函数
def setup_logging(global_config: Optional[GlobalConfig] = None, verbose: bool = False):
    """
    配置全局日志
    - 控制台: INFO (verbose 时 DEBUG)
    - [V5.0] logs/changelog-debug.log (DEBUG) 与 logs/changelog-error.log (ERROR)
    """
    global_config = global_config or GlobalConfig()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(formatter)
    handlers = [console]

    if global_config.LOG_TO_FILE:
        try:
            os.makedirs(global_config.LOG_DIR, exist_ok=True)
            for filename, level in (
                (global_config.DEBUG_LOG_FILE, logging.DEBUG),
                (global_config.ERROR_LOG_FILE, logging.ERROR),
            ):
                handler = logging.FileHandler(
                    os.path.join(global_config.LOG_DIR, filename), encoding="utf-8"
                )
                handler.setLevel(level)
                handler.setFormatter(formatter)
                handlers.append(handler)
        except OSError as e:
            print(f"⚠️ 无法创建日志目录 {global_config.LOG_DIR}: {e}", file=sys.stderr)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    # 第三方库的 DEBUG 日志过于冗长
    for noisy in ("urllib3", "httpx", "openai", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
