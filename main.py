import logging
import sys

import config
from mcp_server import mcp

logger = logging.getLogger(__name__)


def main():
    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(
        level=config.LOG_LEVEL,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.FIGMA_TOKEN:
        logger.error("FIGMA_TOKEN environment variable is required.")
        sys.exit(1)

    import figma_tools  # noqa: F401  registers the tools

    logger.info("figma-swift-mcp server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
