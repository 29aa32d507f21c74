# minipack Runtime Components
"""
Runtime code that gets embedded into every bundle.

The loader is a real Python file so it can be imported and tested directly,
but the emitter copies its source text into each bundle, which keeps bundles
self-contained (no dependency on minipack at run time).
"""

import os


def get_runtime():
    """Return the source text of the module-resolution runtime."""
    path = os.path.join(os.path.dirname(__file__), 'loader.py')
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()
