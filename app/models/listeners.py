from datetime import datetime, timezone
from sqlalchemy import event

from app.models.task import Task


# Auto updated_at
@event.listens_for(Task, "before_update")
def update_timestamp(mapper, connection, target):
    target.updated_at = datetime.now(timezone.utc)
