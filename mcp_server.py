"""MCP server exposing the bridge tools over streamable HTTP.

Runs as: python mcp_server.py
"""
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from config import Settings
from tools import BridgeTools, as_result

logger = logging.getLogger(__name__)

SERVER_NAME = "matrixx360-bridge"


def build_server(settings, tools=None):
    tools = tools or BridgeTools(settings)
    mcp = FastMCP(SERVER_NAME, host="0.0.0.0", port=settings.port)

    @mcp.tool(description="Returns basic status for the MatriXx360 MCP bridge.")
    def health_check() -> Dict[str, Any]:
        return tools.health_check()

    @mcp.tool(description="Commit one or more files to the configured GitHub repository "
                          "as a single commit. Fails instead of overwriting if the branch "
                          "moved while the commit was being built.")
    def git_commit_and_push(commitMessage: str, files: List[Dict[str, str]],
                            branch: Optional[str] = None) -> Dict[str, Any]:
        payload = {"commitMessage": commitMessage, "files": files, "branch": branch}
        return as_result(tools.git_commit_and_push, payload)

    @mcp.tool(description="Trigger a deployment on Render.")
    def render_deploy(serviceId: Optional[str] = None) -> Dict[str, Any]:
        return as_result(tools.render_deploy, {"serviceId": serviceId})

    return mcp


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("mcp.server.lowlevel.server").setLevel(logging.WARNING)
    build_server(settings).run(transport="streamable-http")


if __name__ == "__main__":
    main()
