"""Constants and configuration for the columnmark engine."""

class ColumnmarkConstants:
    """Central configuration constants for overflow highlighting."""

    # Column limits
    DEFAULT_COLUMN_LIMIT = 80  # Used when nothing else resolves
    PRESET_LIMITS = (60, 70, 80, 90, 100)  # Limits with a set-and-enable command

    # Display columns
    TAB_WIDTH = 8  # Distance between tab stops
    CONTROL_CHAR_WIDTH = 2  # Control characters render as ^X

    # Markers
    MARKER_TAG = "columnmark-overflow"  # Tag carried by every overflow marker

    # Mode line
    MODE_LINE_FORMAT = " {}col"

    # Content categories
    CATEGORY_PROGRAMMING = "programming"
    CATEGORY_TEXT = "text"
    # Pygments lexer aliases that count as prose rather than code
    PROSE_LEXER_ALIASES = frozenset({
        "text", "markdown", "md", "rst", "restructuredtext",
        "tex", "latex", "org", "asciidoc", "adoc",
    })

    # Classification
    GUESS_SAMPLE_CHARS = 10000  # Content sample size used for lexer guessing

    # Faces: inherited style name -> blessed compound formatter
    FACES = {
        "warning": "bold_yellow",
        "error": "bold_red",
        "success": "bold_green",
        "highlight": "on_blue",
        "default": "normal",
    }

    # Settings validation
    MIN_COLUMN_LIMIT = 1
