# errors.py
# Error taxonomy for the measurement engine.
# Only whole-document failures are raised; bad individual shapes are skipped by the extractors.


class MeasurementError(Exception):
    """Base class for errors that abort a single measurement call."""


class InvalidFormat(MeasurementError):
    """The document failed structural parsing for its declared format."""

    def __init__(self, file_format, message):
        self.file_format = file_format
        super().__init__(f"Invalid {file_format.upper()} file: {message}")


class UnsupportedFormat(MeasurementError):
    """No extractor is registered for the file extension."""

    def __init__(self, extension, supported):
        self.extension = extension
        self.supported = tuple(supported)
        allowed = " or ".join(e.upper() for e in self.supported)
        shown = f".{extension}" if extension else "(no extension)"
        super().__init__(f"Unsupported file type: {shown}. Please upload {allowed} files.")
