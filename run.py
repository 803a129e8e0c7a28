#!/usr/bin/env python3
"""
Bank Portal Entry Point

Starts the FastAPI server with the bank portal API.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from bank_portal.api import run_server
from bank_portal.config import get_config


if __name__ == "__main__":
    settings = get_config()
    print("🏦 Starting Bank Portal...")
    print(f"🗄️  Backend: {settings.backend}")
    print(f"🔒 Authentication {'enabled' if settings.auth_enabled else 'disabled (demo user)'}")
    print(f"🌐 API available at: http://localhost:{settings.api_port}")
    print(f"📚 Documentation at: http://localhost:{settings.api_port}/docs")
    print()

    try:
        run_server(
            host=settings.api_host,
            port=settings.api_port,
            debug=False
        )
    except KeyboardInterrupt:
        print("\n👋 Shutting down Bank Portal...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
