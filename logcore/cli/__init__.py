"""Command-line tools for logcore.

- ``python -m logcore.cli.analyze``: analyze a file, URL, or raw text
  and print the markdown report plus concise summary.
"""
