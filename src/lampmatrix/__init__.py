"""lampmatrix: animation scripts for 5x5 LED matrix lamps."""

from lampmatrix.graphics.color import Color
from lampmatrix.graphics.matrix import Frame, Matrix, Vector
from lampmatrix.script.compiler import Script, compile_script, load_script
from lampmatrix.playback.scheduler import PlaybackScheduler

__version__ = "0.1.0"

__all__ = [
    "Color",
    "Frame",
    "Matrix",
    "Vector",
    "Script",
    "compile_script",
    "load_script",
    "PlaybackScheduler",
]
