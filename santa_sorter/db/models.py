from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


person_restrictions = Table(
    "restrictions",
    Base.metadata,
    Column("person_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
    Column("restricted_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
)


class Roster(Base):
    __tablename__ = "rosters"

    id = Column(Integer, primary_key=True)
    chat_id = Column(BigInteger, unique=True, nullable=False, index=True)
    title = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_draw_seed = Column(Integer, nullable=True)
    last_drawn_at = Column(DateTime(timezone=True), nullable=True)

    people = relationship(
        "Person",
        back_populates="roster",
        cascade="all, delete-orphan",
        order_by="Person.id",
    )

    def __repr__(self) -> str:
        return f"<Roster(id={self.id}, chat_id={self.chat_id})>"


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    name_key = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    roster = relationship("Roster", back_populates="people")
    restrictions = relationship(
        "Person",
        secondary=person_restrictions,
        primaryjoin=id == person_restrictions.c.person_id,
        secondaryjoin=id == person_restrictions.c.restricted_id,
        back_populates="restricted_by",
        order_by="Person.id",
    )
    restricted_by = relationship(
        "Person",
        secondary=person_restrictions,
        primaryjoin=id == person_restrictions.c.restricted_id,
        secondaryjoin=id == person_restrictions.c.person_id,
        back_populates="restrictions",
        order_by="Person.id",
    )

    __table_args__ = (
        UniqueConstraint("roster_id", "name_key", name="uq_people_roster_name_key"),
    )

    def __repr__(self) -> str:
        return "<Person(id={0}, roster_id={1}, name={2})>".format(self.id, self.roster_id, self.name)
