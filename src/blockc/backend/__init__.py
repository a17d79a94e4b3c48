"""Backend package - block tree to target source text."""

from .base import BlockBackend
from .cpp import CppBackend, emit_cpp
from .python import PythonBackend, emit_python

BACKENDS: dict[str, type[BlockBackend]] = {
    "cpp": CppBackend,
    "python": PythonBackend,
}
