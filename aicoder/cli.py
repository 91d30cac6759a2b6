# aicoder/cli
"""
ai-coder CLI 主入口
"""
import sys

import click
from rich.markup import escape

from aicoder import __version__
from aicoder.config import load_settings, Settings
from aicoder.core.client import ChatClient
from aicoder.core.committer import NO_CHANGES
from aicoder.core.errors import AICoderError, ConfigurationError, RequestCancelled
from aicoder.core.session import Session
from aicoder.core.storage import LocalFileStore
from aicoder.core.vcs import GitVersionControl
from aicoder.repl import Repl
from aicoder.utils.console import console, error, set_verbose

# ------------------------------
# CLI 主入口
# ------------------------------

@click.group()
@click.option("--key", "-k", "api_key", default=None, help="API key (default: $OPENROUTER_API_KEY)")
@click.option("--url", "-u", "api_url", default=None, help="API URL (default: $OPENROUTER_API_URL or OpenRouter)")
@click.option("--model", "-m", "model", default=None, help="LLM model name (default: $OPENROUTER_MODEL_NAME)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show prompts, replies and git commands")
@click.version_option(__version__, message="ai-coder v%(version)s")
@click.pass_context
def cli(ctx, api_key, api_url, model, verbose):
    """🤖 ai-coder - AI pair programmer"""
    ctx.ensure_object(dict)
    try:
        settings = load_settings({"api_key": api_key, "api_url": api_url, "model": model, "verbose": verbose})
    except ConfigurationError as e:
        error(escape(str(e)))
        raise click.Abort()
    set_verbose(settings.verbose)
    ctx.obj["SETTINGS"] = settings


# ------------------------------
# 辅助函数
# ------------------------------

def _build_session(settings: Settings, files) -> Session:
    """创建会话；缺少凭据属于配置错误，直接退出"""
    try:
        api_key = settings.require_api_key()
    except ConfigurationError as e:
        error(escape(str(e)))
        raise click.Abort()
    client = ChatClient(api_key=api_key, api_url=settings.api_url, model=settings.model)
    return Session(client=client, store=LocalFileStore("."), vcs=GitVersionControl("."), files=files)


def _read_request() -> str:
    request = sys.stdin.read()
    if not request.strip():
        error("No request given on standard input.")
        raise click.Abort()
    return request


def _run_once(operation):
    """执行一次性命令；任何失败都以非零状态退出"""
    try:
        return operation()
    except RequestCancelled:
        console.print("\nAborted.", style="yellow")
        raise click.Abort()
    except AICoderError as e:
        error(escape(str(e)))
        raise click.Abort()


# ------------------------------
# 命令
# ------------------------------

@cli.command()
@click.argument("files", nargs=-1)
@click.pass_context
def ask(ctx, files):
    """💬 Ask about code (request on stdin, reply is streamed)"""
    session = _build_session(ctx.obj["SETTINGS"], files)
    request = _read_request()
    _run_once(lambda: session.ask(request))


@cli.command()
@click.argument("files", nargs=-1)
@click.option("--stream/--no-stream", default=False, help="Print the reply while it arrives")
@click.pass_context
def commit(ctx, files, stream):
    """💾 Apply the requested changes to FILES and create a git commit"""
    session = _build_session(ctx.obj["SETTINGS"], files)
    request = _read_request()
    result = _run_once(lambda: session.commit(request, stream=stream))
    if not result.committed and result.reason != NO_CHANGES:
        raise click.Abort()


@cli.command()
@click.argument("files", nargs=-1)
@click.pass_context
def repl(ctx, files):
    """🧑‍💻 Interactive REPL mode"""
    session = _build_session(ctx.obj["SETTINGS"], files)
    Repl(session).run()


# ------------------------------
# 主入口
# ------------------------------
if __name__ == '__main__':
    cli(obj={})
