"""linkcheck — verify links and fragments in a generated HTML document tree."""

__version__ = "0.1.0"
