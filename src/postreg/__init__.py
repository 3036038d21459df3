"""postreg — Markdown post registry for static blog sites."""

__version__ = "0.1.0"
