class Sun3DSensError(Exception):
    """Base class for every fatal conversion error."""


class UsageError(Sun3DSensError):
    pass


class MissingCalibrationFile(Sun3DSensError, FileNotFoundError):
    pass


class MalformedCalibration(Sun3DSensError, ValueError):
    pass


class FilenameParseError(Sun3DSensError, ValueError):
    pass


class NoDepthFrames(Sun3DSensError, RuntimeError):
    pass


class FrameRangeExceeded(Sun3DSensError, ValueError):
    pass


class PartialRead(Sun3DSensError, OSError):
    pass
