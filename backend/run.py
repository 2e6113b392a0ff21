"""
Start the tokenintel API server with uvicorn
"""

import os
import sys

import uvicorn


def run_server():
    """Serve ``tokenintel.main:app``; HOST, PORT and RELOAD come from the environment."""
    uvicorn.run(
        "tokenintel.main:app",
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '8001')),
        reload=os.getenv('RELOAD', 'false').lower() == 'true',
    )
    return 0


if __name__ == '__main__':
    sys.exit(run_server())
