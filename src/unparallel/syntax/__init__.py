"""
Ruby Syntax Package.

Modules:
    - ``nodes``: The closed node model and source positions.
    - ``parser``: tree-sitter frontend producing ``SyntaxTree`` objects.
    - ``search``: Subtree search helpers.
"""
