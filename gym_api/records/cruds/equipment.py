from typing import List
from sqlalchemy.orm import Session

from gym_api.analytics.schemas.records import EquipmentRecord
from gym_api.records.models.equipment import Equipment


def get_active_equipment(db: Session) -> List[EquipmentRecord]:
    rows = db.query(Equipment.category, Equipment.is_active).filter(Equipment.is_active.is_(True)).all()
    return [EquipmentRecord.model_validate(row) for row in rows]
