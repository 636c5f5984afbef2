"""Running the external ``flutter pub get`` tool."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("flutter", "pub", "get")


@dataclass
class PubGetResult:
    success: bool
    output: str


class PubGetRunner:
    """Fetches a project's packages after its manifest was written.

    Attributes:
        command: Command line to run inside the project directory.
    """

    def __init__(self, command: Sequence[str] = DEFAULT_COMMAND) -> None:
        self.command = tuple(command)

    async def run(self, project_dir: Path) -> PubGetResult:
        """Run the command and capture its combined output.

        A missing executable is reported as a failed result rather than
        raised.
        """
        logger.info("Running '%s' in %s", " ".join(self.command), project_dir)

        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                cwd=str(project_dir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError:
            return PubGetResult(False, f"'{self.command[0]}' executable not found")
        except OSError as e:
            return PubGetResult(False, str(e))

        stdout, _ = await process.communicate()
        output = stdout.decode("utf-8", errors="replace") if stdout else ""

        if process.returncode != 0:
            logger.warning(
                "'%s' exited with code %d", " ".join(self.command), process.returncode
            )
        return PubGetResult(process.returncode == 0, output)
