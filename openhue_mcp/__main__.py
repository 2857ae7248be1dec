from openhue_mcp.server import main

main()
