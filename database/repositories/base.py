from sqlalchemy.orm import Session


class BaseRepository:
    """Entity repository bound to the Session of the current unit of work."""

    def __init__(self, db: Session):
        self.db = db
