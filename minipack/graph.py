"""
Dependency graph builder.

Starting from an entry file, discovers every module it transitively imports,
breadth first, and produces one ModuleRecord per distinct canonical path.
"""
import os
from collections import deque
from itertools import count

from minipack.analyzer import PythonModuleAnalyzer
from minipack.errors import ParseError, UnresolvedPathError
from minipack.log import debug_log
from minipack.records import ModuleRecord
from minipack.resolver import canonical_entry, resolve
from minipack.transformer import PythonModuleTransformer


def load_source(path, specifier, from_path):
    """
    Read a module's text.

    Raises:
        UnresolvedPathError: If path does not name a readable regular file
        ParseError: If the file is not valid UTF-8
    """
    if not os.path.isfile(path):
        raise UnresolvedPathError(specifier, from_path, resolved_path=path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise ParseError(path, e, suggestion="Save the module as UTF-8") from e
    except OSError as e:
        raise UnresolvedPathError(specifier, from_path, resolved_path=path) from e


def build_graph(entry_path, analyzer=None, transformer=None):
    """
    Build the module graph reachable from entry_path.

    Args:
        entry_path: Path to the entry module
        analyzer: SourceAnalyzer; defaults to PythonModuleAnalyzer
        transformer: CodeTransformer; defaults to PythonModuleTransformer

    Returns:
        List of ModuleRecord in discovery order; the entry has id 0 and
        record i has id i.

    Raises:
        ParseError: If any module cannot be parsed
        UnresolvedPathError: If any specifier names a missing file
    """
    if analyzer is None:
        analyzer = PythonModuleAnalyzer()
    if transformer is None:
        transformer = PythonModuleTransformer()

    next_id = count()
    entry = canonical_entry(entry_path)
    ids = {entry: next(next_id)}
    # A path is queued only when it first receives an id, so each is loaded once
    queue = deque([(entry, entry_path, None)])
    records = []

    while queue:
        path, specifier, from_path = queue.popleft()

        debug_log(f"Loading module {ids[path]}: {path}")
        text = load_source(path, specifier, from_path)
        tree = analyzer.parse(text, path)
        dependencies = list(analyzer.extract_imports(tree))
        code = transformer.lower(tree)

        directory = os.path.dirname(path)
        mapping = {}
        for dependency in dependencies:
            resolved = resolve(dependency, directory)
            if resolved not in ids:
                ids[resolved] = next(next_id)
                queue.append((resolved, dependency, path))
            mapping[dependency] = ids[resolved]

        records.append(ModuleRecord(
            id=ids[path],
            path=path,
            raw_dependencies=dependencies,
            code=code,
            mapping=mapping,
        ))

    debug_log(f"Discovered {len(records)} module(s)")
    return records
