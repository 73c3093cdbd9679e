"""Domain exceptions for lifegrid.

Every error the engine or the universe manager raises derives from
``LifegridError`` so the API layer can map them to structured responses.
"""


class LifegridError(Exception):
    """Base class for lifegrid errors."""

    error_type = "lifegrid_error"
    status_code = 400


class InvalidDimensions(LifegridError):
    """Width or height is not a positive integer."""

    error_type = "invalid_dimensions"
    status_code = 422


class InvalidCells(LifegridError):
    """A cell buffer has the wrong length or holds an unknown state."""

    error_type = "invalid_cells"
    status_code = 422


class CellOutOfBounds(LifegridError):
    """Row/column pair lies outside the universe."""

    error_type = "cell_out_of_bounds"
    status_code = 404

    def __init__(self, row: int, column: int, width: int, height: int):
        self.row = row
        self.column = column
        super().__init__(
            f"Cell ({row}, {column}) is outside the {width}x{height} universe"
        )


class InvalidRequest(LifegridError):
    """A manager operation was called with unusable arguments."""

    error_type = "invalid_request"
    status_code = 422
