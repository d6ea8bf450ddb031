"""Error kinds raised by build tasks."""


class BuildError(Exception):
    """Base error; fails the current task with a non-zero exit."""
    pass


class ParseError(BuildError):
    """Malformed JSON document (fragment, descriptor, or resolved tree)."""
    pass


class NotFoundError(BuildError):
    """Missing template, package, or output directory."""
    pass


class ValidationError(BuildError):
    """Missing or invalid task option, reported before any I/O."""
    pass
