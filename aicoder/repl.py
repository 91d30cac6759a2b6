# aicoder/repl.py
"""
交互式 REPL：读取一行、分派命令、报告结果，然后回到提示符。
任何可恢复的错误都只报告，不会结束会话。
"""

from typing import Callable, Dict, Optional

from rich.markup import escape
from rich.table import Table

from .core.errors import AICoderError, RequestCancelled, SessionBusyError
from .core.session import Session
from .core.shell import run_shell_command
from .utils.console import console, heading, info, warning, error, show_welcome, prompt_input

PROMPT = "ai-coder> "

HELP_TEXT = """    /add <file>...       Add files to context
    /drop <file>...      Remove files from context
    /files               List current files
    /commit <request>    Apply the requested changes and commit them
    /ask <question>      Ask a question without file context
    /run <command>       Execute a shell command
    /clear               Clear conversation history
    /quit                Exit REPL
    /help                Show this help

Any other input is sent to the model together with the current files.
Press Ctrl-C while a reply is streaming to abort it.
"""


class Repl:
    def __init__(self, session: Session, input_func: Callable[[str], str] = prompt_input):
        self.session = session
        self.input_func = input_func
        self.running = False
        self.commands: Dict[str, Callable[[str], None]] = {
            "add": self.cmd_add,
            "drop": self.cmd_drop,
            "files": self.cmd_files,
            "commit": self.cmd_commit,
            "ask": self.cmd_ask,
            "run": self.cmd_run,
            "clear": self.cmd_clear,
            "help": self.cmd_help,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
        }

    # ------------------------------
    # 命令实现
    # ------------------------------

    def cmd_add(self, args: str):
        if not args:
            warning("Usage: /add <file>...")
            return
        self.session.add_files(args.split())

    def cmd_drop(self, args: str):
        if not args:
            warning("Usage: /drop <file>...")
            return
        self.session.drop_files(args.split())

    def cmd_files(self, args: str):
        files = self.session.active_files
        if not len(files):
            console.print("No files in context.", style="yellow")
            return
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("File", style="cyan")
        table.add_column("Status", style="green")
        for path, status in files.items():
            table.add_row(escape(path), status.value)
        console.print(table)

    def cmd_commit(self, args: str):
        if not args:
            warning("Usage: /commit <request>")
            return
        self.session.commit(args)

    def cmd_ask(self, args: str):
        if not args:
            warning("Usage: /ask <question>")
            return
        self.session.question(args)

    def cmd_run(self, args: str):
        if not args:
            warning("Usage: /run <command>")
            return
        result = run_shell_command(args)
        if result.stdout:
            console.out(result.stdout.rstrip("\n"), highlight=False)
        if result.stderr:
            console.out(result.stderr.rstrip("\n"), style="red", highlight=False)
        if not result.ok:
            warning(f"Command exited with status {result.returncode}")

    def cmd_clear(self, args: str):
        self.session.clear_history()

    def cmd_help(self, args: str):
        heading("REPL Commands")
        console.print(HELP_TEXT, markup=False)

    def cmd_quit(self, args: str):
        self.running = False

    # ------------------------------
    # 分派
    # ------------------------------

    def handle_line(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        try:
            if line.startswith("/"):
                name, _, args = line[1:].partition(" ")
                handler = self.commands.get(name)
                if handler is None:
                    warning(f"Unknown command: /{escape(name)}. Type /help for available commands.")
                    return
                handler(args.strip())
            else:
                self.session.ask(line)
        except (RequestCancelled, KeyboardInterrupt):
            console.print("\nAborted.", style="yellow")
        except SessionBusyError as e:
            warning(str(e))
        except AICoderError as e:
            error(escape(str(e)))
        except OSError as e:
            error(escape(f"{e.__class__.__name__}: {e}"))

    def read_line(self) -> Optional[str]:
        try:
            return self.input_func(PROMPT)
        except KeyboardInterrupt:
            console.print()
            return ""
        except EOFError:
            return None

    def run(self) -> None:
        show_welcome()
        self.running = True
        while self.running:
            line = self.read_line()
            if line is None:
                break
            self.handle_line(line)
        info("Goodbye!")
