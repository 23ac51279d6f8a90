"""Snippet visualizer — line-stepping traces of small Java/C++ snippets."""

from .api import (  # noqa: F401
    visualize_snippet,
    visualize_java,
    visualize_cpp,
)
