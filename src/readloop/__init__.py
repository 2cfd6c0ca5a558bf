"""
Readloop: local-first note capture.

A small personal text library that provides:
- One-step capture of typed or pasted text
- Three-line previews for browsing
- Copy back to the clipboard, delete one or many
"""

__version__ = "0.1.0"
