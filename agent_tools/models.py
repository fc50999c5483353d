"""SQLAlchemy ORM models for the data the built-in tools read and write."""
import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from .database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(64), primary_key=True)
    slug = Column(String(128), unique=True, nullable=False, index=True)
    name = Column(String(255), default="")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    members = relationship("TenantMember", back_populates="tenant", cascade="all, delete-orphan")
    integrations = relationship("Integration", back_populates="tenant", cascade="all, delete-orphan")


class TenantMember(Base):
    __tablename__ = "tenant_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    role = Column(String(32), default="member")  # owner / admin / member / viewer
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    tenant = relationship("Tenant", back_populates="members")


class Integration(Base):
    __tablename__ = "integrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    provider = Column(String(64), nullable=False)  # google / microsoft / linkedin / ...
    connected = Column(Boolean, default=False)

    tenant = relationship("Tenant", back_populates="integrations")


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    category = Column(String(32), default="")  # token_spend / subscription / refund / ...
    amount_cents = Column(Integer, default=0)
    description = Column(String(512), default="")
    occurred_at = Column(DateTime, default=datetime.datetime.utcnow, index=True)


class KbDocument(Base):
    __tablename__ = "kb_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    slug = Column(String(255), default="")
    title = Column(String(255), default="")
    body = Column(Text, default="")
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), default="")
    location = Column(String(255), default="")
    starts_at = Column(DateTime, nullable=False, index=True)
    ends_at = Column(DateTime, nullable=True)


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), default="")
    company = Column(String(255), default="")
    stage = Column(String(32), default="lead")  # lead / prospect / customer / churned
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class AgentMemory(Base):
    __tablename__ = "agent_memory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    agent_id = Column(String(64), nullable=False, index=True)
    session_id = Column(String(64), default="")
    role = Column(String(16), nullable=False)  # user / assistant
    content = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class DelegatedTask(Base):
    __tablename__ = "delegated_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    from_agent = Column(String(64), default="")
    to_agent = Column(String(64), default="")
    description = Column(Text, default="")
    status = Column(String(16), default="queued")  # queued / running / done / failed
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
