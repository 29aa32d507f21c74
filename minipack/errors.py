"""
Error types for the minipack bundler.
"""


class BundleError(Exception):
    """Base exception for bundling failures with location, context and hints."""
    def __init__(self, message, path=None, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.path = path
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = [f"\n❌ {self._title()}"]
        if self.path:
            lines.append(f" in {self.path}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)

    def _title(self):
        return "Bundle Error"


class ParseError(BundleError):
    """A module's source text could not be turned into a syntax tree."""
    def __init__(self, path, cause, line_number=None, column=None, context=None, suggestion=None):
        self.cause = cause
        super().__init__(
            str(cause),
            path=path,
            line_number=line_number,
            column=column,
            context=context,
            suggestion=suggestion,
        )

    def _title(self):
        return "Parse Error"


class UnresolvedPathError(BundleError):
    """A dependency specifier did not resolve to a loadable file."""
    def __init__(self, specifier, from_path=None, resolved_path=None):
        self.specifier = specifier
        self.from_path = from_path
        self.resolved_path = resolved_path
        if from_path is None:
            message = f"Entry module '{specifier}' not found"
        else:
            message = f"Cannot resolve '{specifier}'"
        if resolved_path:
            message += f" (looked for {resolved_path})"
        super().__init__(
            message,
            path=from_path,
            suggestion="Specifiers must name an existing file, including its extension",
        )

    def _title(self):
        return "Unresolved Import"


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None
