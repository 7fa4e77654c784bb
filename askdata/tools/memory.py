"""Tools that append notes to user, workspace and data source memory."""

import json

from ..db.repositories import DataSourceRepository, UserRepository, WorkspaceRepository
from ..models.tool import SaveInformationArgs
from .registry import ToolContext


class SaveUserInformationTool:
    """Handler for ``save_user_information``."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def __call__(self, args: SaveInformationArgs, context: ToolContext) -> str:
        if not self.users.append_memory(context.user.id, args.information):
            return json.dumps({"error": "Could not save user information"})
        return json.dumps({"success": "User information saved"})


class SaveWorkspaceInformationTool:
    """Handler for ``save_workspace_information``."""

    def __init__(self, workspaces: WorkspaceRepository):
        self.workspaces = workspaces

    async def __call__(self, args: SaveInformationArgs, context: ToolContext) -> str:
        if not self.workspaces.append_memory(context.workspace.id, args.information):
            return json.dumps({"error": "Could not save workspace information"})
        return json.dumps({"success": "Workspace information saved"})


class SaveDataSourceInformationTool:
    """Handler for ``save_datasource_information``."""

    def __init__(self, data_sources: DataSourceRepository):
        self.data_sources = data_sources

    async def __call__(self, args: SaveInformationArgs, context: ToolContext) -> str:
        data_source = None
        if args.data_source_id:
            data_source = self.data_sources.get(args.data_source_id, context.workspace.id)
        if data_source is None:
            return json.dumps({"error": "DataSource not found"})

        if not self.data_sources.append_memory(data_source.id, args.information):
            return json.dumps({"error": "Could not save data source information"})
        return json.dumps({"success": "DataSource information saved"})
