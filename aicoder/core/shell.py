# aicoder/core/shell.py
"""REPL /run 命令：通过 shell 执行命令并完整捕获输出"""

import subprocess
from dataclasses import dataclass
from typing import Optional


@dataclass
class ShellResult:
    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_shell_command(command: str, cwd: Optional[str] = None) -> ShellResult:
    completed = subprocess.run(
        command,
        shell=True,
        cwd=cwd,
        capture_output=True,
        text=True,
        errors="replace",
    )
    return ShellResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
