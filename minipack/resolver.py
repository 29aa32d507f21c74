"""
Path resolution for import specifiers.

Resolution is a pure path computation: it never checks that the file exists.
The graph builder reports missing files when it tries to load them.
"""
import os


def resolve(raw_specifier, from_directory):
    """
    Turn an import specifier into a canonical absolute path.

    Args:
        raw_specifier: Specifier exactly as written, e.g. "./lib/util.py"
        from_directory: Directory containing the requesting module

    Returns:
        Normalized absolute path with symbolic links resolved. An absolute
        specifier ignores the requesting module's directory. No extension
        is ever added.
    """
    # os.path.join drops from_directory when the specifier is absolute
    joined = os.path.join(from_directory, raw_specifier)
    return os.path.realpath(os.path.abspath(joined))


def canonical_entry(entry_path):
    """Canonicalize the entry path relative to the current working directory."""
    return resolve(entry_path, os.getcwd())
