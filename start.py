#!/usr/bin/env python3
"""
Startup script for the Legal Review service
"""
import os
import sys
import subprocess

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv()


def check_requirements():
    """Check if the configuration is usable."""
    print("🔍 Checking configuration...")

    if not os.path.exists('.env'):
        print("⚠️  .env file not found. Defaults will be used and every request must carry its API key.")
    elif not os.getenv("DEFAULT_API_KEY"):
        print("ℹ️  DEFAULT_API_KEY not set. Every request must carry its API key.")
    else:
        print("✅ Default API key configured")

    provider = os.getenv("DEFAULT_PROVIDER", "deepseek")
    if provider not in ("deepseek", "doubao", "tongyi"):
        print(f"❌ DEFAULT_PROVIDER '{provider}' is not one of deepseek, doubao, tongyi")
        return False

    return True


def start_application():
    """Start the API server."""
    print("🚀 Starting Legal Review service...")

    if not check_requirements():
        print("❌ Configuration check failed. Please fix the issues above.")
        return False

    # Read configuration from environment variables with defaults
    debug_mode = os.getenv("DEBUG", "True").lower() in ("true", "1", "yes")
    host = os.getenv("HOST", "localhost")
    port = int(os.getenv("PORT", "8000"))

    print(f"   API at: http://{host}:{port}/api")
    print(f"   API documentation at: http://{host}:{port}/docs")

    # Enable hot reloading in development mode
    if debug_mode:
        print("   🔥 Hot reloading enabled (development mode)")
    else:
        print("   ⚙️  Hot reloading disabled (production mode)")

    print("\n🛑 Press Ctrl+C to stop the application\n")

    try:
        uvicorn_args = [
            sys.executable, "-m", "uvicorn",
            "legal_review.main:app",
            "--host", host,
            "--port", str(port)
        ]

        # Add --reload flag in development mode
        if debug_mode:
            uvicorn_args.append("--reload")

        subprocess.run(uvicorn_args)
    except KeyboardInterrupt:
        print("\n👋 Application stopped.")
        return True


if __name__ == "__main__":
    start_application()
