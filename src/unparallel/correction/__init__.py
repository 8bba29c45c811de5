"""
Autocorrection Package.

Modules:
    - ``strategy``: Chooses the rewrite form from the statement's context.
    - ``correctors``: Builds the replacement text for each form.
    - ``patcher``: Applies corrections to source text.
"""
