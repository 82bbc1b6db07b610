"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from runcake.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class IamCredential(Base):
    __tablename__ = "iam_credentials"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    access_key_id = Column(String(128), nullable=False)
    secret_access_key = Column(String(255), nullable=False)
    region = Column(String(30), nullable=False, default="us-east-1")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Runner(Base):
    __tablename__ = "runners"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    init_code = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Script(Base):
    __tablename__ = "scripts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(150), nullable=False, index=True)
    description = Column(Text)
    content = Column(Text, nullable=False)
    runner_id = Column(String(36), ForeignKey("runners.id"), nullable=True)
    permission_level = Column(String(20), nullable=False, default="admin_only")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    runner = relationship("Runner")


class TargetGroup(Base):
    __tablename__ = "target_groups"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(150), nullable=False)
    description = Column(Text)
    aws_tag_key = Column(String(128), nullable=False)
    aws_tag_value = Column(String(256), nullable=False)
    region = Column(String(30))
    iam_credential_id = Column(String(36), ForeignKey("iam_credentials.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    credential = relationship("IamCredential")


class ScriptExecution(Base):
    __tablename__ = "script_executions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    script_id = Column(String(36), ForeignKey("scripts.id"), nullable=False, index=True)
    target_group_id = Column(String(36), ForeignKey("target_groups.id"), nullable=False)
    execution_mode = Column(String(10), nullable=False, default="random")
    template_variables = Column(Text)
    status = Column(String(20), nullable=False, default="pending", index=True)
    instance_ids = Column(Text)
    command_id = Column(String(64))
    output = Column(Text)
    error_message = Column(Text)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
