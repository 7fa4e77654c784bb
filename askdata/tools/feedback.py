"""User feedback tool."""

import json
from uuid import uuid4

from ..db.database_models import MessageLogDO
from ..db.repositories import MessageLogRepository, QueryLogRepository
from ..models.tool import RegisterUserFeedbackArgs
from ..utils.logger import get_logger
from .registry import ToolContext


class RegisterUserFeedbackTool:
    """Handler for ``register_user_feedback``.

    Query feedback updates the query log; negative feedback removes the
    query from the examples. Response feedback creates a message log, which
    becomes an example when positive.
    """

    def __init__(self, query_logs: QueryLogRepository, message_logs: MessageLogRepository):
        self.query_logs = query_logs
        self.message_logs = message_logs
        self.logger = get_logger("tools.feedback")

    async def __call__(self, args: RegisterUserFeedbackArgs, context: ToolContext) -> str:
        positive = args.intent == "positive"

        if args.type == "query":
            if not args.query_log_id:
                return json.dumps({"error": "query_log_id is required for query feedback"})
            log = self.query_logs.get(args.query_log_id)
            if log is None or log.workspace_id != context.workspace.id:
                return json.dumps({"error": "Query log not found"})
            self.query_logs.update_feedback(log.id, positive, args.feedback)

        if args.type == "response":
            self.message_logs.create(MessageLogDO(
                id=str(uuid4()),
                workspace_id=context.workspace.id,
                prompt=args.prompt or "",
                response=args.response or "",
                positive_feedback=args.feedback if positive else None,
                negative_feedback=None if positive else args.feedback,
                use_as_example=positive,
            ))

        self.logger.info(f"Registered {args.intent} {args.type} feedback")
        return json.dumps({"success": "Feedback saved"})
