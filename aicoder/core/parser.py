# aicoder/core/parser.py
"""
响应解析：把模型的自由文本回复分解为 (filename, content) 更新列表。

约定的格式::

    path/to/file.py
    ```python
    <完整文件内容>
    ```

文件名单独占一行，紧接着是代码块起始行（语言标记被忽略），然后是文件内容，
最后是代码块结束行。解析用逐行状态机实现：

- SEEKING_FILENAME: 在代码块之外，记住上一行作为候选文件名；
- IN_BLOCK: 在代码块之内，收集内容直到遇到结束行。

代码块内部的行永远不会被当作文件名。起始行用了 N 个反引号时，
结束行必须是至少 N 个反引号，因此四个反引号的代码块可以包含三个反引号的行。
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional

from .models import ParsedFileUpdate
from .prompts import NEW_FILE_MARKER
from ..utils.console import debug

FENCE_CHAR = "`"
MIN_FENCE = 3


class ParserState(Enum):
    SEEKING_FILENAME = "seeking_filename"
    IN_BLOCK = "in_block"


def fence_length(line: str) -> int:
    """起始行的反引号数量；不是代码块起始行时返回 0"""
    stripped = line.strip()
    count = len(stripped) - len(stripped.lstrip(FENCE_CHAR))
    return count if count >= MIN_FENCE else 0


def is_fence_closer(line: str, length: int) -> bool:
    stripped = line.strip()
    return len(stripped) >= length and stripped == FENCE_CHAR * len(stripped)


def clean_filename(line: Optional[str]) -> Optional[str]:
    """
    从代码块上方那一行得到文件名；不像文件名时返回 None。

    去掉 markdown 修饰（`name`、**name**）和提示词里使用的 "(new file)" 标记。
    以冒号或句号结尾的句子是说明文字，不是文件名；
    含空白但既没有目录分隔符也没有扩展名的一行同样视为说明文字。
    """
    if line is None or fence_length(line):
        return None
    name = line.strip()
    if name.endswith(NEW_FILE_MARKER):
        name = name[:-len(NEW_FILE_MARKER)].rstrip()
    name = name.strip("`*").strip()
    if name.endswith(":"):
        bare = name[:-1].strip("`*").strip()
        if not bare or any(ch.isspace() for ch in bare):
            return None
        name = bare
    if not name or name.endswith("."):
        return None
    if any(ch.isspace() for ch in name) and "/" not in name and "." not in name:
        return None
    return name


class ResponseParser:
    """逐行状态机；parse() 可重复调用，每次都从头开始"""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.state = ParserState.SEEKING_FILENAME
        self.updates: List[ParsedFileUpdate] = []
        self._candidate: Optional[str] = None
        self._filename: Optional[str] = None
        self._fence = 0
        self._body: List[str] = []

    def feed_line(self, line: str) -> None:
        if self.state is ParserState.SEEKING_FILENAME:
            length = fence_length(line)
            if length:
                self._open_block(length)
            else:
                self._candidate = line
            return

        if is_fence_closer(line, self._fence):
            self._close_block()
        else:
            self._body.append(line)

    def _open_block(self, length: int) -> None:
        self._filename = clean_filename(self._candidate)
        self._candidate = None
        self._fence = length
        self._body = []
        self.state = ParserState.IN_BLOCK

    def _close_block(self) -> None:
        if self._filename:
            content = "\n".join(self._body).rstrip()
            self.updates.append(ParsedFileUpdate(filename=self._filename, content=content))
        else:
            debug(f"{len(self._body)} lines", title="Skipped fenced block without filename")
        self._filename = None
        self._body = []
        self.state = ParserState.SEEKING_FILENAME

    def finish(self) -> List[ParsedFileUpdate]:
        if self.state is ParserState.IN_BLOCK:
            # 未闭合的代码块（例如回复被截断）不产生更新
            debug(self._filename or "<anonymous>", title="Dropped unterminated block")
            self._filename = None
            self._body = []
            self.state = ParserState.SEEKING_FILENAME
        return list(self.updates)

    def parse(self, text: str) -> List[ParsedFileUpdate]:
        self.reset()
        for line in text.replace("\r\n", "\n").split("\n"):
            self.feed_line(line)
        return self.finish()


def parse_response(text: str) -> List[ParsedFileUpdate]:
    return ResponseParser().parse(text)


def latest_contents(updates: Iterable[ParsedFileUpdate]) -> Dict[str, str]:
    """同名文件以最后一次出现的内容为准"""
    result = {}
    for update in updates:
        result[update.filename] = update.content
    return result
