"""
Tab Topics Backend Server Entry Point

Starts the FastAPI server for the tab sorting backend.

Usage:
    uv run python examples/start_server.py
"""

import sys
from pathlib import Path

# Add src to path so we can import tab_topics
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tab_topics.config import Provider, get_settings, setup_logging

def main():
    """Start the FastAPI server."""

    print("=" * 80)
    print("Tab Topics Backend Server")
    print("=" * 80)
    print()

    # Verify configuration
    try:
        settings = get_settings()
        setup_logging(settings.log_level)
        print("✓ Configuration loaded")
        print(f"  - Provider: {settings.ai_provider.value}")
        if settings.ai_provider == Provider.REMOTE:
            print(f"  - Gemini Model: {settings.gemini_model}")
            if not settings.gemini_api_key:
                print("  ! GEMINI_API_KEY is not set, every tab will be tagged 'Missing API Key'")
        else:
            print(f"  - Embedding Model: {settings.openai_embedding_model}")
            print(f"  - Naming Model: {settings.openai_llm_model}")
            print(f"  - Model Endpoint: {settings.openai_base_url or 'OpenAI'}")
        print()
    except Exception as e:
        print(f"✗ Configuration error: {e}")
        print()
        print("Check the values in your .env file.")
        sys.exit(1)

    # Start server
    print("Starting FastAPI server...")
    print(f"Server will be available at: http://localhost:8000")
    print(f"API documentation: http://localhost:8000/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print("=" * 80)
    print()

    import uvicorn
    from tab_topics.server.app import app

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        reload=False,  # Set to True for development
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nServer stopped by user")
        sys.exit(0)
    except Exception as e:
        print(f"\n\n✗ Server error: {e}")
        sys.exit(1)
