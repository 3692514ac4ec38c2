from fastmcp import FastMCP

mcp = FastMCP("figma-swift-mcp")
