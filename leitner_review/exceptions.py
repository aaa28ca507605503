class ReviewError(Exception):
    pass


class InvalidBoxLevel(ReviewError):
    def __init__(self, box_level):
        self.box_level = box_level
        super().__init__(f"Invalid box level: {box_level}. Must be between 1 and 5")


class InvalidReviewRequest(ReviewError):
    pass


class ItemNotFound(ReviewError):
    pass


class UserNotAuthorized(ReviewError):
    pass


class StoreFailure(ReviewError):
    """Persistence-layer error, surfaced to the caller unchanged"""
    pass


class ProgressNotFound(StoreFailure):
    pass


class DuplicateProgress(StoreFailure):
    """A progress record already exists for the (user, item) pair"""
    pass
