"""
Bundle emission.

The emitter first turns module records into ModuleTableEntry values and then
serializes them, together with the module-resolution runtime, into a single
Python script.
"""
import os
from typing import Dict, NamedTuple

from minipack.records import validate_graph
from minipack.runtime import get_runtime


_BANNER = (
    '#!/usr/bin/env python3\n'
    '# -*- coding: utf-8 -*-\n'
    '# DO NOT EDIT! This script was automatically generated\n'
    '# by minipack from {entry}.\n'
    '# Manual edits may just break it.\n\n'
)

_SEPARATOR_HEAVY = '# ' + '=' * 78 + '\n'
_SEPARATOR = '# ' + '-' * 78 + '\n'

_BOOTSTRAP = 'bootstrap(__modules__, __name__)\n'


class ModuleTableEntry(NamedTuple):
    """One module as it appears in the bundle's module table."""
    id: int
    filename: str
    source: str
    mapping: Dict[str, int]


def escape_source(source):
    """
    Render module source as a triple-quoted string literal.

    Every line is escaped on its own: backslashes, control characters and
    non-ASCII characters via unicode_escape, double quotes as \\x22. The
    literal therefore never closes early and evaluates back to the source.
    """
    lines = [
        line
        .encode('unicode_escape')
        .decode('ascii')
        .replace('"', '\\x22')
        for line in source.split('\n')
    ]
    return '"""\\\n' + '\n'.join(lines) + '"""'


class BundleEmitter:
    """Serializes module records into a self-contained Python bundle."""

    def __init__(self, banner=True):
        self._banner = banner

    def emit(self, modules):
        """Return the bundle text for records ordered by id, entry first."""
        modules = list(modules)
        validate_graph(modules)
        entries = self.table_entries(modules)
        return ''.join(self.emit_lines(entries))

    def table_entries(self, modules):
        root = modules[0].directory
        return [
            ModuleTableEntry(
                record.id,
                os.path.relpath(record.path, root).replace('\\', '/'),
                record.code,
                dict(record.mapping),
            )
            for record in modules
        ]

    # ------------------------------------------------------------------

    def emit_lines(self, entries):
        if self._banner:
            yield _BANNER.format(entry=entries[0].filename)
        yield from self.emit_runtime()
        yield from self.emit_module_table(entries)
        yield from self.emit_bootstrap()

    def emit_runtime(self):
        yield _SEPARATOR_HEAVY
        runtime = get_runtime()
        yield runtime if runtime.endswith('\n') else runtime + '\n'
        yield '\n'

    def emit_module_table(self, entries):
        yield _SEPARATOR_HEAVY
        yield '\n'
        yield '__modules__ = {\n'
        for entry in entries:
            yield from self.emit_entry(entry)
        yield '}\n\n'

    def emit_entry(self, entry):
        yield _SEPARATOR
        yield f'{entry.id}: (\n'
        yield f'    define({entry.filename!r}, {escape_source(entry.source)}),\n'
        if entry.mapping:
            yield '    {\n'
            for specifier, target in entry.mapping.items():
                yield f'        {specifier!r}: {target},\n'
            yield '    },\n'
        else:
            yield '    {},\n'
        yield '),\n'

    def emit_bootstrap(self):
        yield _SEPARATOR_HEAVY
        yield '\n'
        yield _BOOTSTRAP


def emit(modules, banner=True):
    """Emit the bundle for an ordered sequence of module records."""
    return BundleEmitter(banner=banner).emit(modules)
