"""
Static Analysis Package.

Decides which parallel assignments can be written sequentially, and in which order.

Modules:
    - ``dependencies``: Pairs targets with sources and records read-after-write dependencies.
    - ``ordering``: Topological sort of the pairs.
    - ``safety``: Exemption checks producing findings.
"""
