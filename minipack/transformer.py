"""
Module Lowering - Converts analyzed modules to executable Python code.

This module contains the ImportLowering class that turns Lark parse trees of
import declarations into require() calls, and the PythonModuleTransformer
that rewrites a whole module so it runs with `require`, `module` and
`exports` supplied by the bundle runtime.
"""

import ast
from abc import ABC, abstractmethod

from lark import Transformer


class CodeTransformer(ABC):
    """Lowers a syntax tree into executable code text."""

    @abstractmethod
    def lower(self, tree):
        """Return executable code text for an already parsed module."""


class ImportLowering(Transformer):
    """
    Transforms import declarations into single-line Python statements.

    Each declaration lowers to statements joined by semicolons so the lowered
    module keeps the line numbers of its source.
    """

    TEMPORARY = "__dependency__"

    def start(self, args):
        """Unwrap the declaration."""
        return args[0]

    def source(self, args):
        """Re-quote the specifier as a Python string literal."""
        return repr(ast.literal_eval(str(args[0])))

    def specifier(self, args):
        """Return (imported name, local name)."""
        imported = str(args[0])
        local = str(args[1]) if len(args) > 1 else imported
        return imported, local

    def specifier_list(self, args):
        return list(args)

    def import_bare(self, args):
        """import "./a.py" only runs the module."""
        return f"require({args[0]})"

    def import_default(self, args):
        """import a from "./a.py" binds the default export, or the exports object."""
        name, source = args
        return f"{name} = require({source}); {name} = getattr({name}, 'default', {name})"

    def import_namespace(self, args):
        """import * as a from "./a.py" binds the exports object."""
        name, source = args
        return f"{name} = require({source})"

    def import_named(self, args):
        """import { x, y as z } from "./a.py" binds individual exports."""
        specifiers, source = args
        if len(specifiers) == 1:
            imported, local = specifiers[0]
            return f"{local} = require({source}).{imported}"
        temp = self.TEMPORARY
        return "; ".join(
            [f"{temp} = require({source})"]
            + self._bind(temp, specifiers)
            + [f"del {temp}"]
        )

    def import_mixed(self, args):
        """import a, { x } from "./a.py" binds the default and named exports."""
        name, specifiers, source = args
        temp = self.TEMPORARY
        return "; ".join(
            [f"{temp} = require({source})", f"{name} = getattr({temp}, 'default', {temp})"]
            + self._bind(temp, specifiers)
            + [f"del {temp}"]
        )

    def _bind(self, holder, specifiers):
        return [f"{local} = {holder}.{imported}" for imported, local in specifiers]


class PythonModuleTransformer(CodeTransformer):
    """Lowers modules produced by PythonModuleAnalyzer."""

    def lower(self, tree):
        lines = list(tree.lines)

        lowering = ImportLowering()
        for declaration in tree.imports:
            lines[declaration.lineno - 1] = lowering.transform(declaration.tree)

        # Bottom-up, so inserted lines never shift a binding still to be placed
        for export in sorted(tree.exports, key=lambda e: e.end_lineno, reverse=True):
            statement = "; ".join(f"exports.{exported} = {local}" for exported, local in export.names)
            index = export.end_lineno - 1
            if export.compound:
                following = index + 1
                if following < len(lines) and not lines[following].strip():
                    lines[following] = statement
                else:
                    lines.insert(following, statement)
            else:
                line = lines[index]
                lines[index] = f"{line[:export.end_col]}; {statement}{line[export.end_col:]}"

        return '\n'.join(lines)
