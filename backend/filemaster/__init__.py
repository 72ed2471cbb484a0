"""FileMaster: a browser file manager confined to one base directory."""

__version__ = "1.0.0"
