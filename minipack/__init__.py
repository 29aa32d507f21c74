# minipack - Core Bundler Components
"""
Core modules for the minipack bundler:
- errors: Error types with location and hints
- grammar: Lark grammar for import declarations
- analyzer: Source analysis (parse, extract imports)
- transformer: Lowering of declarations to require() calls
- resolver: Import specifier to canonical path
- graph: Dependency graph builder
- emitter: Bundle serialization
- runtime: Module-resolution runtime embedded into bundles
"""

from .errors import BundleError, ParseError, UnresolvedPathError
from .grammar import declaration_grammar
from .analyzer import PythonModuleAnalyzer, SourceAnalyzer
from .transformer import CodeTransformer, PythonModuleTransformer
from .records import ModuleRecord
from .resolver import resolve
from .graph import build_graph
from .emitter import BundleEmitter, emit

__version__ = '0.1.0'

__all__ = [
    'BundleError',
    'ParseError',
    'UnresolvedPathError',
    'declaration_grammar',
    'PythonModuleAnalyzer',
    'SourceAnalyzer',
    'CodeTransformer',
    'PythonModuleTransformer',
    'ModuleRecord',
    'resolve',
    'build_graph',
    'BundleEmitter',
    'emit',
]
