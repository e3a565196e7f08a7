"""
Symbolic names.

Python has no atom type, so queue names in the runtime config are carried as
``Symbol`` values: identifiers that are still plain text for storage and
comparison, but distinguishable from arbitrary strings at validation time.
"""


class Symbol(str):
    """An identifier-shaped name, e.g. ``Symbol("default")``."""

    __slots__ = ()

    def __new__(cls, name: str) -> "Symbol":
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"a symbol must be a valid identifier, got: {name!r}")
        return super().__new__(cls, name)

    def __repr__(self) -> str:
        return f":{str.__str__(self)}"
