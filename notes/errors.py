# notes/errors.py

class AnalysisError(Exception):
    """The analysis collaborator could not produce a Song."""

class InvalidRangeError(ValueError):
    """A transposition or speed outside its allowed bounds."""
    def __init__(self, name: str, value, lo, hi):
        super().__init__(f"{name}={value!r} outside [{lo}, {hi}]")
        self.name = name
        self.value = value
        self.lo = lo
        self.hi = hi

    @property
    def bound(self):
        return self.lo if self.value < self.lo else self.hi

class NoActiveSongError(RuntimeError):
    """Transport or export invoked with no song loaded."""
