"""flipbook: video to numbered stills and back."""

__version__ = "0.1.0"
PROGRAM_NAME = "flipbook"
