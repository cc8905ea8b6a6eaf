"""logcore: chunked, multi-model analysis of log files and long documents."""

__version__ = "0.1.0"
