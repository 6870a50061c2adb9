"""Script compilation and the script folder."""

from lampmatrix.script.compiler import Script, compile_script, load_script, parse_color
from lampmatrix.script.library import ScriptLibrary

__all__ = ["Script", "compile_script", "load_script", "parse_color", "ScriptLibrary"]
