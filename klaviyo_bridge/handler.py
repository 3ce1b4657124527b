"""
Serverless entry point.

Mangum translates API Gateway / Vercel Python function events into ASGI
calls on the FastAPI app. Point the platform at
`klaviyo_bridge.handler.handler`.
"""

from mangum import Mangum

from klaviyo_bridge.main import app

# lifespan="off": the app has no startup/shutdown work and Lambda never
# delivers shutdown events
handler = Mangum(app, lifespan="off")
