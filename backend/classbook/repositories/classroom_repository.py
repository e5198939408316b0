from typing import Optional

from sqlalchemy.orm import Session

from classbook.models.classroom import Classroom
from classbook.repositories.base import translate_store_errors


class ClassroomRepository:
    def __init__(self, session: Session):
        self.session = session

    @translate_store_errors
    def get_by_id(self, classroom_id: str) -> Optional[Classroom]:
        return self.session.query(Classroom).filter(Classroom.classroom_id == classroom_id).first()

    @translate_store_errors
    def list_all(self, active_only: bool = False) -> list[Classroom]:
        query = self.session.query(Classroom)
        if active_only:
            query = query.filter(Classroom.is_active.is_(True))
        return query.order_by(Classroom.name).all()
