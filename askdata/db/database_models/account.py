"""Workspace, user and data source database models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


@dataclass
class WorkspaceDO:
    """Workspace data object - maps to workspaces table."""

    id: str
    name: str
    assistant_id: Optional[str] = None
    memory: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class UserDO:
    """User data object - maps to users table."""

    id: str
    name: str
    workspace_id: str
    email: Optional[str] = None
    memory: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class DataSourceDO:
    """Data source data object - maps to data_sources table."""

    id: str
    workspace_id: str
    name: str
    engine: str
    description: Optional[str] = None
    context: Optional[str] = None
    schema: List[Any] = field(default_factory=list)
    memory: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
