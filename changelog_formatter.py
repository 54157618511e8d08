"""
[V5.0] 将供应商返回的分类文本整理为 Markdown
纯文本变换，无网络、无状态。
"""
import re
from typing import List, Tuple

CATEGORY_HEADERS = [
    "Features:",
    "Improvements:",
    "Bug Fixes:",
    "Breaking Changes:",
    "Security:",
    "Performance:",
    "Documentation:",
    "Dependencies:",
    "Refactor:",
    "Tests:",
    "Other:",
]

SECTION_SPLIT_RE = re.compile(
    r"\n(?=" + "|".join(re.escape(h) for h in CATEGORY_HEADERS) + r")"
)
BULLET_RE = re.compile(r"^[•\-\*]\s*")
LABEL_RE = re.compile(r"^#([A-Za-z0-9][\w-]*)\s*:?\s*(.*)$")

# 标签关键字 (小写) -> 展示标签
LABEL_TAGS = {
    "feature": "✨ Feature",
    "feat": "✨ Feature",
    "fix": "🐛 Fix",
    "bug": "🐛 Fix",
    "bugfix": "🐛 Fix",
    "security": "🔒 Security",
    "perf": "⚡ Performance",
    "performance": "⚡ Performance",
    "docs": "📝 Docs",
    "doc": "📝 Docs",
    "deps": "📦 Dependencies",
    "dependencies": "📦 Dependencies",
    "refactor": "♻️ Refactor",
    "test": "✅ Tests",
    "tests": "✅ Tests",
    "ci": "👷 CI",
    "build": "🏗️ Build",
    "chore": "🔧 Chore",
    "style": "🎨 Style",
    "i18n": "🌐 i18n",
    "a11y": "♿ Accessibility",
    "ui": "💄 UI",
    "ux": "🧭 UX",
    "breaking": "💥 Breaking",
}
DEFAULT_TAG = "🔹 Change"
# 仅匹配 AIService 追加的署名区，正文中的分隔线不受影响
FOOTER_RE = re.compile(r"\n---\n(_Generated with [^\n]*_)\s*$")
HORIZONTAL_RULE_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")


def label_tag(label: str) -> str:
    return LABEL_TAGS.get(label.lower(), DEFAULT_TAG)


def _format_item(line: str) -> str:
    if HORIZONTAL_RULE_RE.match(line):
        return line
    match = LABEL_RE.match(line)
    if match:
        label, text = match.groups()
        return f"- **{label_tag(label)}** {text}".rstrip()
    return f"- {BULLET_RE.sub('', line)}"


def _is_header(line: str) -> bool:
    return any(line.startswith(h) for h in CATEGORY_HEADERS)


def _split_footer(content: str) -> Tuple[str, str]:
    """拆出末尾的署名区 ("---" + "_Generated with ..._")"""
    match = FOOTER_RE.search(content)
    if not match:
        return content, ""
    return content[: match.start()], f"---\n{match.group(1)}"


def format_to_markdown(content: str) -> str:
    """
    按分类标题 (如 "Features:") 切分：标题 -> "## 标题"，其后的非空行 -> 列表项。
    列表项会先去掉已有的项目符号；以 "#标签" 开头的行按标签表加上展示标签。
    第一个分类标题之前的文本 (如提示信息) 原样保留为段落，末尾署名区原样保留。
    """
    parts: List[str] = []
    body, footer = _split_footer(content)

    for section in SECTION_SPLIT_RE.split(body):
        if not section.strip():
            continue
        title, *items = section.split("\n")

        if not _is_header(title.strip()):
            parts.append(section.strip())
            continue

        lines = [f"## {title.strip()}"]
        for item in items:
            if item.strip():
                lines.append(_format_item(item.strip()))
        parts.append("\n".join(lines))

    if footer:
        parts.append(footer)
    return "\n\n".join(parts).strip()
