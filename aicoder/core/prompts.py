# aicoder/core/prompts.py
"""
提示词模板（jinja2 渲染）。
"""

from typing import Iterable

import jinja2

from .models import FileContextEntry

SYSTEM_PROMPT = """Act as an expert developer. You will help modify code files.
When editing files, always show the complete file content like this:

filename.py
```
def hello():
    print("hello world")
```

Rules:
- Show the filename alone on a line
- Show complete file content between ``` marks
- Never use ... or partial files
- Ask questions if the request is unclear"""

USER_PROMPT = """Request: {{ request }}
{% if file_blocks %}

Files to modify:

{{ file_blocks }}
{%- endif %}"""

QUESTION_PROMPT = "I have a question: {{ question }}"

COMMIT_SYSTEM_PROMPT = """You write git commit messages.
Reply with a single concise summary line in the imperative mood, at most 72 characters.
Do not wrap it in quotes or code fences and do not add any explanation."""

COMMIT_USER_PROMPT = """Generate a concise commit message for these changes:

{{ diff }}

Original request: {{ request }}"""

FILE_BLOCK = "{{ path }}{{ ' (new file)' if new else '' }}\n```\n{{ body }}```\n"

NEW_FILE_MARKER = "(new file)"

_env = jinja2.Environment(
    loader=jinja2.DictLoader({
        "system": SYSTEM_PROMPT,
        "user": USER_PROMPT,
        "question": QUESTION_PROMPT,
        "commit_system": COMMIT_SYSTEM_PROMPT,
        "commit_user": COMMIT_USER_PROMPT,
        "file_block": FILE_BLOCK,
    }),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def _render(name: str, **values) -> str:
    return _env.get_template(name).render(**values)


def system_prompt() -> str:
    return _render("system")


def render_file_blocks(entries: Iterable[FileContextEntry]) -> str:
    """把可读或尚不存在的文件渲染成 filename + 代码块；不可读的文件跳过"""
    blocks = []
    for entry in entries:
        if not entry.exists:
            blocks.append(_render("file_block", path=entry.path, new=True, body=""))
        elif entry.readable:
            body = entry.content
            if body and not body.endswith("\n"):
                body += "\n"
            blocks.append(_render("file_block", path=entry.path, new=False, body=body))
    return "\n".join(blocks)


def user_prompt(request: str, entries: Iterable[FileContextEntry] = ()) -> str:
    return _render("user", request=request.strip(), file_blocks=render_file_blocks(entries))


def question_prompt(question: str) -> str:
    return _render("question", question=question.strip())


def commit_messages_prompt(request: str, diff: str):
    """返回提交信息请求的 (system, user) 两段文本"""
    return _render("commit_system"), _render("commit_user", request=request.strip(), diff=diff)
