from .center import McpServerCenter
from .client import HttpMcpClient, McpClient, McpConnection, McpTool, McpToolInfo, create_client
from .config import HttpTransportConfig, McpServerConfig, StdioTransportConfig
from .transport import StdioTransport, Transport

__all__ = [
    "McpServerCenter", "McpClient", "HttpMcpClient", "McpConnection", "McpTool", "McpToolInfo",
    "create_client", "McpServerConfig", "HttpTransportConfig", "StdioTransportConfig",
    "StdioTransport", "Transport",
]
