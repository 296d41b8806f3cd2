from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


def _uuid():
    return str(uuid4())


def _now():
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )


class Decision(Base):
    __tablename__ = "decisions"
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    items = relationship(
        "DecisionItem",
        back_populates="decision",
        cascade="all, delete-orphan",
        order_by="DecisionItem.created_at",
    )


class DecisionItem(Base):
    __tablename__ = "decision_items"
    __table_args__ = (
        CheckConstraint("type IN ('pro', 'con')", name="decision_items_type_check"),
    )
    id = Column(String, primary_key=True, default=_uuid)
    decision_id = Column(
        String, ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    decision = relationship("Decision", back_populates="items")


def make_engine(database_url):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI runs sync dependencies in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
