"""Directory of named animation scripts (`<name>.txt`)."""

import logging
from pathlib import Path

from lampmatrix.core.errors import ParseError, ScriptNotFound
from lampmatrix.script.compiler import Script, compile_script

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".txt"


class ScriptLibrary:
    """Lists and loads scripts from a folder."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def names(self) -> list[str]:
        """Script names available, sorted, without extension."""
        if not self.path.is_dir():
            raise ScriptNotFound(f"scripts directory not found: {self.path}")

        return sorted(
            entry.stem
            for entry in self.path.iterdir()
            if entry.is_file() and entry.suffix == SCRIPT_SUFFIX
        )

    def path_for(self, name: str) -> Path:
        """Resolve a script name (with or without `.txt`) to its file."""
        if name.endswith(SCRIPT_SUFFIX):
            name = name[: -len(SCRIPT_SUFFIX)]

        if not name or name.startswith(".") or "/" in name or "\\" in name:
            raise ScriptNotFound(f"invalid script name: {name!r}")

        path = self.path / f"{name}{SCRIPT_SUFFIX}"
        if not path.is_file():
            raise ScriptNotFound(f"script not found: {name}")
        return path

    def exists(self, name: str) -> bool:
        try:
            self.path_for(name)
        except ScriptNotFound:
            return False
        return True

    def load(self, name: str) -> Script:
        """Read and compile a script by name.

        Raises:
            ScriptNotFound: Unknown or invalid name
            ParseError: The script is not UTF-8 text or does not compile
        """
        path = self.path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(0, f"not valid UTF-8 text (byte {e.start})") from None

        script = compile_script(text, name=path.stem)
        logger.info(f"Loaded script {script.name} ({len(script)} frames) from {path}")
        return script
