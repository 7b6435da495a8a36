from fastapi import status


class FrontDeskError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "The request could not be completed."

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidInputError(FrontDeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid input."


class NotFoundError(FrontDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found."


class RoomStateError(FrontDeskError):
    status_code = status.HTTP_409_CONFLICT
    detail = "The room is not in a state that allows this operation."


class DuplicateRoomError(FrontDeskError):
    status_code = status.HTTP_409_CONFLICT
    detail = "A room with this number already exists."


class InsufficientStockError(FrontDeskError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Insufficient stock."


class StoreError(FrontDeskError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "The data store rejected the operation."
