"""Call graph model and the line-oriented text codec.

The format is the one emitted and consumed by the static points-to analysis:
one function per line, `$`-separated fields, `name:kind:id` nodes.
"""
