class TrackballError(ValueError):
    """Invalid input to a trackball computation."""


class InvalidSpeedFactorError(TrackballError):
    pass


class DegenerateViewportError(TrackballError):
    pass
