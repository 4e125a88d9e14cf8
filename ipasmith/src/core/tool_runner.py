from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence
import os
import subprocess

from rich.markup import escape

from ipasmith.logger import get_console
from ipasmith.src.core.errors import ToolExecutionError


@dataclass
class ToolResult:
    """Outcome of a single external tool invocation"""

    stdout: str
    exit_code: int
    stderr: str = ""


class ToolRunner:
    """Narrow boundary around every external process the signing flow spawns.

    Subclasses implement `execute`. `run` adds the shared behaviour: logging
    the command and turning a non-zero exit into ToolExecutionError.
    """

    def __init__(self):
        self.console = get_console()

    def execute(
        self, name: str, args: Sequence[str], env: Optional[Mapping[str, str]]
    ) -> ToolResult:
        raise NotImplementedError

    def run(
        self,
        name: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        quiet: bool = False,
    ) -> ToolResult:
        cmd = [name, *args]
        self.console.log(f"[cyan]Running:[/] {escape(' '.join(cmd))}")

        result = self.execute(name, list(args), env)
        if result.exit_code != 0:
            self.console.log(
                f"[red]{name} failed:[/]\nstdout: {escape(result.stdout)}\nstderr: {escape(result.stderr)}"
            )
            raise ToolExecutionError(cmd, result.exit_code, result.stdout, result.stderr)

        if result.stdout and not quiet:
            self.console.log(f"[green]{name} output:[/]\n{escape(result.stdout.rstrip())}")
        return result


class SubprocessToolRunner(ToolRunner):
    """Runs tools as child processes, environment layered over os.environ"""

    def execute(
        self, name: str, args: Sequence[str], env: Optional[Mapping[str, str]]
    ) -> ToolResult:
        full_env: Optional[Dict[str, str]] = None
        if env:
            full_env = {**os.environ, **{k: str(v) for k, v in env.items()}}

        try:
            proc = subprocess.run(
                [name, *args],
                capture_output=True,
                text=True,
                env=full_env,
            )
        except FileNotFoundError:
            # Shell convention for "command not found"
            return ToolResult(stdout="", exit_code=127, stderr=f"{name}: not found")

        return ToolResult(
            stdout=proc.stdout, exit_code=proc.returncode, stderr=proc.stderr
        )


def run_external_tool(
    name: str,
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    runner: Optional[ToolRunner] = None,
) -> ToolResult:
    """Run `name args...` with the default subprocess runner unless one is given"""
    return (runner or SubprocessToolRunner()).run(name, args, env)
