"""
统一的控制台输出工具，基于 rich 实现。
模型输出的原始文本经 stream_text 直接写出，不解释 markup。
"""
from rich.console import Console as RichConsole
from rich.theme import Theme
from rich.highlighter import ReprHighlighter
from typing import Any

# 自定义主题
CUSTOM_THEME = Theme({
    "info": "cyan bold",
    "success": "green bold",
    "warning": "yellow bold",
    "error": "red bold",
    "heading": "bold underline",
    "path": "magenta",
    "debug": "dim",
    "prompt": "green",
})

# 全局控制台实例（单例）
console = RichConsole(theme=CUSTOM_THEME, soft_wrap=True)

_verbose = False


def set_verbose(enabled: bool):
    global _verbose
    _verbose = bool(enabled)


# --- 便捷输出函数 ---

def info(message: str):
    """蓝色信息提示"""
    console.print(f"💡 [info]INFO[/info]: {message}")


def success(message: str):
    """绿色成功提示"""
    console.print(f"✅ [success]SUCCESS[/success]: {message}")


def warning(message: str):
    """黄色警告提示"""
    console.print(f"⚠️  [warning]WARNING[/warning]: {message}")


def error(message: str):
    """红色错误提示"""
    console.print(f"❌ [error]ERROR[/error]: {message}")


def heading(title: str):
    """标题输出"""
    console.print(f"\n🎯 [heading]{title}[/heading]\n")


def debug(obj: Any, title: str = "Debug Output"):
    """调试输出，仅在 verbose 模式下显示"""
    if not _verbose:
        return
    highlighter = ReprHighlighter()
    console.print(f"[debug]🐞 {title}:[/debug]")
    console.print(highlighter(str(obj)), markup=False)


def stream_text(fragment: str):
    """原样写出模型输出片段（不换行、不解析 markup），并立即刷新"""
    console.out(fragment, end="", highlight=False)
    console.file.flush()


# --- 交互式输入 ---

def prompt_input(prompt: str) -> str:
    """带样式的输入提示，EOF 与 Ctrl-C 由调用方处理"""
    return console.input(f"[prompt]{prompt}[/prompt]")


# --- 初始化欢迎信息 ---

def show_welcome():
    """显示欢迎横幅"""
    console.print("\n" + "═" * 50, style="bold blue")
    console.print("🚀 [bold green]ai-coder REPL[/bold green] - AI pair programmer", end="")
    console.print(" 🤖", emoji=True)
    console.print("Type /help for available commands.")
    console.print("═" * 50 + "\n", style="bold blue")
