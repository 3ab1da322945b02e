"""Errors raised before any prioritiser scoring starts."""


class EmptyQueryError(ValueError):
    """Raised when a prioritiser that needs phenotypes is given none."""

    def __init__(self, prioritiser: str = "HiPhive"):
        super().__init__(
            f"{prioritiser} prioritiser requires at least one query phenotype term"
        )
        self.prioritiser = prioritiser
