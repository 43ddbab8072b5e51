"""Error classes for hyperstencil operations."""


class HyperstencilError(Exception):
    """Base error for all hyperstencil operations."""
    pass

class StencilIOError(HyperstencilError):
    """File could not be opened, read or written."""
    pass

class StencilImageError(HyperstencilError):
    """Image container could not be decoded or encoded."""
    pass

class StencilFormatError(HyperstencilError):
    """Stencil header missing, malformed or inconsistent with the given dimensions."""
    pass
