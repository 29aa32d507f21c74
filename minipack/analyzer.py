"""
Source analysis for bundled modules.

A bundled module is Python source extended with ES-style module declarations.
Import declarations and export prefixes must start at column 0 and fit on one
line; everything else is ordinary Python. The analyzer parses declarations
with Lark, checks the remaining Python with the ast module and records where
each dependency is named so the transformer can lower the module later.
"""
import ast
import io
import keyword
import re
import tokenize
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from lark import Lark, Token, Transformer, Tree
from lark.exceptions import UnexpectedInput

from minipack.errors import ParseError, get_line_context
from minipack.grammar import declaration_grammar


_IMPORT_DECLARATION = re.compile(
    r"""^import(?:\s*["'{*]|\s+[a-zA-Z_]\w*\s*(?:,\s*\{[^}]*\}\s*)?from\s*["'])"""
)
_DEFAULT_EXPORT = re.compile(r"^export[ \t]+default[ \t]+(?![=.(\[,:;]|[-+*/%&|^@<>!]=)")
_NAMED_EXPORT = re.compile(r"^export[ \t]+(?!(?:and|or|in|is|not|if|else|for)\b)(?=[a-zA-Z_])")
_DEFINITION = re.compile(r"^(?:async[ \t]+def|def|class)\b")

_STRING_START = tuple(
    getattr(tokenize, name) for name in ("FSTRING_START", "TSTRING_START") if hasattr(tokenize, name)
)
_STRING_END = tuple(
    getattr(tokenize, name) for name in ("FSTRING_END", "TSTRING_END") if hasattr(tokenize, name)
)


@dataclass
class ImportDeclaration:
    """A parsed import declaration and the line it occupies."""
    lineno: int
    tree: Tree


@dataclass
class ExportBinding:
    """Names a top-level statement publishes on the module's exports."""
    lineno: int
    end_lineno: int
    end_col: int
    names: List[Tuple[str, str]]  # (exported name, local name)
    compound: bool


@dataclass
class RequireCall:
    """A literal require("...") call in the Python body."""
    lineno: int
    col: int
    specifier: str


@dataclass
class ModuleSyntax:
    """
    Syntax tree of one bundled module.

    `lines` holds the normalized body: import declarations are replaced by
    `pass` and export prefixes are stripped, so that `body` is its ast.
    """
    path: Optional[str]
    lines: List[str]
    body: ast.Module
    imports: List[ImportDeclaration] = field(default_factory=list)
    exports: List[ExportBinding] = field(default_factory=list)
    requires: List[RequireCall] = field(default_factory=list)


class SourceAnalyzer(ABC):
    """Turns module text into a syntax tree and lists the modules it imports."""

    @abstractmethod
    def parse(self, text, path=None):
        """Parse text into a syntax tree; raise ParseError on malformed input."""

    @abstractmethod
    def extract_imports(self, tree):
        """Return raw import specifiers in source order."""


class ImportExtractor(Transformer):
    """Reduces a parsed import declaration to its specifier."""

    def start(self, args):
        return args[0]

    def import_bare(self, args):
        return args[-1]

    import_default = import_bare
    import_namespace = import_bare
    import_named = import_bare
    import_mixed = import_bare

    def source(self, args):
        return ast.literal_eval(str(args[0]))


class PythonModuleAnalyzer(SourceAnalyzer):
    """Analyzer for Python modules written with import/export declarations."""

    def __init__(self):
        self._parser = Lark(declaration_grammar, parser='earley')

    def parse(self, text, path=None):
        if text.startswith('\ufeff'):
            text = text[1:]
        text = text.replace('\r\n', '\n').replace('\r', '\n')
        source_lines = text.split('\n')
        in_strings = self._string_interior_lines(text, path)

        lines = list(source_lines)
        imports = []
        exported = {}  # lineno -> True for default exports
        for index, line in enumerate(source_lines):
            lineno = index + 1
            if lineno in in_strings:
                continue

            if _IMPORT_DECLARATION.match(line):
                imports.append(ImportDeclaration(lineno, self._parse_declaration(line, lineno, path)))
                lines[index] = 'pass'
                continue

            match = _DEFAULT_EXPORT.match(line)
            if match:
                rest = line[match.end():]
                if _DEFINITION.match(rest):
                    lines[index] = rest
                    exported[lineno] = True
                else:
                    lines[index] = 'exports.default = ' + rest
                continue

            match = _NAMED_EXPORT.match(line)
            if match:
                lines[index] = line[match.end():]
                exported[lineno] = False

        body = self._parse_body(lines, source_lines, path)
        return ModuleSyntax(
            path=path,
            lines=lines,
            body=body,
            imports=imports,
            exports=self._collect_exports(body, lines, source_lines, exported, path),
            requires=self._collect_requires(body),
        )

    def extract_imports(self, tree):
        extractor = ImportExtractor()
        found = [(d.lineno, 0, extractor.transform(d.tree)) for d in tree.imports]
        found.extend((r.lineno, r.col, r.specifier) for r in tree.requires)
        found.sort(key=lambda item: (item[0], item[1]))
        return [specifier for _, _, specifier in found]

    # ------------------------------------------------------------------

    def _string_interior_lines(self, text, path):
        """Line numbers that continue a multi-line string literal."""
        interior = set()
        starts = []
        try:
            for token in tokenize.generate_tokens(io.StringIO(text).readline):
                if token.type in _STRING_START:
                    starts.append(token.start[0])
                elif token.type in _STRING_END:
                    first = starts.pop() if starts else token.start[0]
                    interior.update(range(first + 1, token.end[0] + 1))
                elif token.type == tokenize.STRING and token.end[0] > token.start[0]:
                    interior.update(range(token.start[0] + 1, token.end[0] + 1))
        except (tokenize.TokenError, SyntaxError) as e:
            # An unclosed brace in a declaration only surfaces at end of file
            for index, line in enumerate(text.split('\n')):
                if _IMPORT_DECLARATION.match(line):
                    self._parse_declaration(line, index + 1, path)
            line_number = getattr(e, 'lineno', None)
            if line_number is None and len(e.args) > 1 and isinstance(e.args[1], tuple):
                line_number = e.args[1][0]
            raise ParseError(
                path,
                e.args[0] if e.args else e,
                line_number=line_number,
                context=get_line_context(text, line_number),
                suggestion="Check for unterminated strings or brackets",
            ) from e
        return interior

    def _parse_declaration(self, line, lineno, path):
        try:
            tree = self._parser.parse(line)
        except UnexpectedInput as e:
            raise ParseError(
                path,
                "Malformed import declaration",
                line_number=lineno,
                column=getattr(e, 'column', None),
                context=line.strip(),
                suggestion='Use import { name } from "./module.py" on a single line',
            ) from e

        for token in tree.scan_values(lambda v: isinstance(v, Token) and v.type == 'NAME'):
            if keyword.iskeyword(token):
                raise ParseError(
                    path,
                    f"'{token}' is a keyword and cannot be bound by an import",
                    line_number=lineno,
                    column=token.column,
                    context=line.strip(),
                )
        return tree

    def _parse_body(self, lines, source_lines, path):
        try:
            return ast.parse('\n'.join(lines), filename=path or '<module>')
        except SyntaxError as e:
            raise ParseError(
                path,
                e.msg,
                line_number=e.lineno,
                column=e.offset,
                context=get_line_context('\n'.join(source_lines), e.lineno),
                suggestion="Check syntax around this line",
            ) from e
        except ValueError as e:
            # Source text containing null bytes
            raise ParseError(path, e) from e

    def _collect_exports(self, body, lines, source_lines, exported, path):
        statements = {}
        for statement in body.body:
            statements.setdefault(statement.lineno, statement)

        bindings = []
        for lineno, is_default in exported.items():
            statement = statements.get(lineno)

            def fail(message):
                return ParseError(
                    path,
                    message,
                    line_number=lineno,
                    context=get_line_context('\n'.join(source_lines), lineno),
                    suggestion="Export a def, class or assignment to plain names",
                )

            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                compound = True
                exported_name = 'default' if is_default else statement.name
                names = [(exported_name, statement.name)]
            elif isinstance(statement, ast.Assign):
                compound = False
                locals_ = []
                for target in statement.targets:
                    if not _collect_target_names(target, locals_):
                        raise fail("Only assignments to plain names can be exported")
                names = [(name, name) for name in locals_]
            elif isinstance(statement, ast.AnnAssign) and statement.value is not None:
                if not isinstance(statement.target, ast.Name):
                    raise fail("Only assignments to plain names can be exported")
                compound = False
                names = [(statement.target.id, statement.target.id)]
            else:
                raise fail("export must introduce a top-level definition or assignment")

            end_line = lines[statement.end_lineno - 1]
            end_col = len(end_line.encode('utf-8')[:statement.end_col_offset].decode('utf-8'))
            bindings.append(ExportBinding(lineno, statement.end_lineno, end_col, names, compound))
        return bindings

    def _collect_requires(self, body):
        calls = []
        for node in ast.walk(body):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Name)
                and node.func.id == 'require'
                and len(node.args) == 1
                and not node.keywords
                and isinstance(node.args[0], ast.Constant)
                and isinstance(node.args[0].value, str)
            ):
                calls.append(RequireCall(node.lineno, node.col_offset, node.args[0].value))
        return calls


def _collect_target_names(target, names):
    if isinstance(target, ast.Name):
        names.append(target.id)
        return True
    if isinstance(target, ast.Starred):
        return _collect_target_names(target.value, names)
    if isinstance(target, (ast.Tuple, ast.List)):
        return all(_collect_target_names(element, names) for element in target.elts)
    return False
