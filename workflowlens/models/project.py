"""projects table."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from workflowlens.core.database import Base, TimestampMixin


class Project(TimestampMixin, Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    repo_full_name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    # checkpoint stamped at the end of every analysis run
    last_analyzed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
