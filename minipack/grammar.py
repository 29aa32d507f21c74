"""
Module Declaration Grammar.

This module contains the Lark grammar for the ES-style import declarations
that bundled modules write on a single line at column 0.
"""

declaration_grammar = r"""
    start: import_decl ";"?

    // --- Imports ---
    import_decl: "import" source                                        -> import_bare
               | "import" NAME "from" source                            -> import_default
               | "import" "*" "as" NAME "from" source                   -> import_namespace
               | "import" "{" specifier_list "}" "from" source          -> import_named
               | "import" NAME "," "{" specifier_list "}" "from" source -> import_mixed

    specifier_list: specifier ("," specifier)* ","?
    specifier: NAME ("as" NAME)?
    source: STRING

    // --- Terminals ---
    STRING: /"(?:[^"\\\n]|\\.)*"/ | /'(?:[^'\\\n]|\\.)*'/
    NAME: /(?!(?:import|from|as)\b)[a-zA-Z_]\w*/

    COMMENT: /\#[^\n]*/

    %import common.WS_INLINE
    %ignore WS_INLINE
    %ignore COMMENT
"""
