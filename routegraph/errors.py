"""routegraph exception hierarchy.

Scanner and core raise these; the CLI, the Flask app and the playground
catch ``RouteGraphError`` at their edges.
"""


class RouteGraphError(Exception):
    """Base for all routegraph errors."""


class ExtractionError(RouteGraphError):
    """A single file could not be parsed.

    Isolated per file by the analyzer; never aborts a whole scan.
    """

    def __init__(self, filename, reason):
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename}: {reason}")


class ProjectError(RouteGraphError):
    """The project root is missing or unreadable."""
