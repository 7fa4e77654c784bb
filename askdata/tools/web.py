"""Web search tool."""

import json

import httpx

from ..models.tool import SearchOnWebArgs
from ..providers.base import WebSearch
from ..utils.logger import get_logger
from .registry import ToolContext


class SearchOnWebTool:
    """Handler for ``search_on_web``: read a page when a URL is given, otherwise search."""

    def __init__(self, web: WebSearch):
        self.web = web
        self.logger = get_logger("tools.web")

    async def __call__(self, args: SearchOnWebArgs, context: ToolContext) -> str:
        try:
            if args.url:
                return await self.web.read(args.url)
            return await self.web.search(args.query)
        except httpx.HTTPError as e:
            self.logger.error(f"Web request failed: {e}")
            return json.dumps({"error": str(e)})
