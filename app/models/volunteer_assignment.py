"""
Volunteer assignments table — a volunteer's current field assignment.
Only assignments in an active status (en_route, idle) are geofence-monitored.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.database import Base


class VolunteerAssignment(Base):
    __tablename__ = "volunteer_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    volunteer_id = Column(String(64), nullable=False, index=True)
    operation_id = Column(String(64))
    status = Column(String(30), nullable=False, default="idle", index=True)  # en_route | idle | on_site | completed
    current_location = Column(JSON)
    assigned_at = Column(DateTime)
    completed_at = Column(DateTime)

    def __repr__(self):
        return f"<VolunteerAssignment {self.id} volunteer={self.volunteer_id} status={self.status}>"
