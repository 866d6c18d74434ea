"""
Error taxonomy for FilmGrade

LUT problems are recovered at the LUT boundary by falling back to the
identity LUT; the remaining errors indicate caller contract violations.
"""


class FilmGradeError(Exception):
    """Base class for all FilmGrade errors"""


class LutLoadError(FilmGradeError):
    """LUT source could not be fetched or read"""

    def __init__(self, message: str, source: str = None):
        super().__init__(message)
        self.source = source


class LutParseError(LutLoadError):
    """LUT source was read but holds no usable cube description"""


class PresetNotFoundError(LutLoadError):
    """Requested preset file does not exist in the catalog"""


class DimensionMismatchError(FilmGradeError):
    """Pixel buffer dimensions disagree with its data or with the input"""


class UnsupportedFormatError(FilmGradeError):
    """Image file format cannot be decoded into a pixel buffer"""

    def __init__(self, message: str, file_type: str = "unsupported"):
        super().__init__(message)
        self.file_type = file_type


class ExportInProgressError(FilmGradeError):
    """An export is already running"""
