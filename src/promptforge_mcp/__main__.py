"""
CLI entry point for PromptForge MCP server
"""

import os

if __name__ == "__main__":
    from . import http_main, main

    # Check if HTTP mode requested
    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "http":
        http_main()
    else:
        main()
