"""javac execution and diagnostic parsing.

Design:
    - Sources and options go into an @argfile (avoids command line length limits)
    - The heap option stays on the command line; javac rejects -J in argfiles
    - Output is parsed into CompilerMessage objects; source excerpt and caret
      lines are folded into the preceding message
"""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from gimport.host.model import CompilerMessage, MessageCategory

if TYPE_CHECKING:
    from gimport.host.jdk import Sdk

_FILE_DIAGNOSTIC = re.compile(r"^(?P<file>.+?\.java):(?P<line>\d+): (?P<kind>error|warning): (?P<text>.*)$")
_GLOBAL_DIAGNOSTIC = re.compile(r"^(?P<kind>error|warning): (?P<text>.*)$")
_NOTE = re.compile(r"^Note: (?P<text>.*)$")
_SUMMARY = re.compile(r"^\d+ (errors?|warnings?)$")

_CATEGORIES = {"error": MessageCategory.ERROR, "warning": MessageCategory.WARNING}


def parse_javac_output(output: str) -> list[CompilerMessage]:
    """Parse javac diagnostics.

    Args:
        output: Combined javac output

    Returns:
        Messages in the order javac printed them
    """
    messages: list[CompilerMessage] = []
    current: CompilerMessage | None = None

    for raw in output.splitlines():
        line = raw.rstrip()
        if not line:
            continue

        match = _FILE_DIAGNOSTIC.match(line)
        if match:
            current = CompilerMessage(
                category=_CATEGORIES[match.group("kind")],
                message=match.group("text"),
                file_path=match.group("file"),
                line=int(match.group("line")),
            )
            messages.append(current)
            continue

        match = _GLOBAL_DIAGNOSTIC.match(line)
        if match:
            current = CompilerMessage(category=_CATEGORIES[match.group("kind")], message=match.group("text"))
            messages.append(current)
            continue

        match = _NOTE.match(line)
        if match:
            current = CompilerMessage(category=MessageCategory.INFORMATION, message=match.group("text"))
            messages.append(current)
            continue

        if _SUMMARY.match(line):
            current = None
            continue

        if current is not None:
            current.message += "\n" + line

    return messages


def _quote_arg(arg: str) -> str:
    return '"' + arg.replace("\\", "\\\\").replace('"', '\\"') + '"'


class JavacRunner:
    """Compiles one module's sources with the JDK's javac."""

    def __init__(self, sdk: "Sdk", heap_mb: int | None = None):
        """Initialize the runner.

        Args:
            sdk: JDK providing javac
            heap_mb: Maximum heap for the compiler JVM
        """
        self.sdk = sdk
        self.heap_mb = heap_mb

    def compile(
        self,
        sources: list[Path],
        output_dir: Path,
        classpath: list[str],
        argfile: Path,
    ) -> tuple[int, list[CompilerMessage]]:
        """Compile ``sources`` into ``output_dir``.

        Args:
            sources: Java source files
            output_dir: Class output directory (created if missing)
            classpath: Classpath entries
            argfile: Where to write the javac argument file

        Returns:
            (return code, parsed diagnostics)
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        argfile.parent.mkdir(parents=True, exist_ok=True)

        args = ["-g", "-encoding", "UTF-8", "-d", output_dir.as_posix()]
        if classpath:
            args += ["-classpath", os.pathsep.join(classpath)]
        args += [s.as_posix() for s in sources]
        argfile.write_text("\n".join(_quote_arg(a) for a in args) + "\n", encoding="utf-8")

        cmd = [str(self.sdk.tool("javac"))]
        if self.heap_mb:
            cmd.append(f"-J-Xmx{self.heap_mb}m")
        cmd.append(f"@{argfile}")

        logging.debug(f"Running: {' '.join(cmd)} ({len(sources)} source file(s))")
        result = subprocess.run(cmd, capture_output=True, text=True, env=self.sdk.build_env())

        messages = parse_javac_output(result.stderr + "\n" + result.stdout)
        if result.returncode != 0 and not any(m.category == MessageCategory.ERROR for m in messages):
            tail = "\n".join((result.stderr or result.stdout).strip().splitlines()[-20:])
            messages.append(
                CompilerMessage(
                    category=MessageCategory.ERROR,
                    message=f"javac exited with code {result.returncode}: {tail}",
                )
            )
        return result.returncode, messages
