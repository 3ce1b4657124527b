"""
Local development server for the storefront Klaviyo API.

Runs the same FastAPI app the serverless handler wraps, with auto-reload.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Storefront Klaviyo API")
    print("=" * 60)
    print()
    print("📌 API Endpoints:")
    print("   - Health Check:  GET        http://localhost:8000/api/health")
    print("   - Lists:         GET        http://localhost:8000/api/lists")
    print("   - Subscribe:     POST       http://localhost:8000/api/subscribe")
    print("   - Unsubscribe:   POST       http://localhost:8000/api/unsubscribe")
    print("   - Profile:       GET/POST/PATCH  http://localhost:8000/api/profile")
    print("   - Preferences:   GET/POST   http://localhost:8000/api/preferences")
    print("   - API Docs:                 http://localhost:8000/docs")
    print()
    print("🔐 Configuration:")
    print("   Set KLAVIYO_PRIVATE_API_KEY and KLAVIYO_NEWSLETTER_LIST_ID in .env")
    print()
    print("📝 Test with curl:")
    print('   curl -X POST "http://localhost:8000/api/subscribe" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"email": "jane@example.com", "firstName": "Jane"}\'')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "klaviyo_bridge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
