from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config.settings import settings
from api.routes.responses import router as responses_router
from api.routes.nominations import router as nominations_router
from utils.logging_config import configure_logging

configure_logging()

DESCRIPTION = """
Assessment response and reviewer nomination workflow for cohort assessments.

## Authentication

All endpoints (except `/`, `/ping` and `/health`) require an API key via the `X-API-Key` header.
Keys are scoped to a client; records of other clients are reported as not found.

Use the **Authorize** button above to set your API key for testing.

## Quick Start

1. **Open a session** → `POST /responses/sessions` with the participant assessment and respondent
2. **Answer questions** → `POST /responses/sessions/{session_id}/advance` per question
3. **Submit** → `POST /responses/sessions/{session_id}/complete`
4. **Nominate reviewers** → `POST /nominations`; reviewers accept with `POST /nominations/{id}/accept`

## Question Set Layouts

| Layout | Description |
|--------|-------------|
| Step-grouped ("pulse") | Questions partitioned into ordered steps |
| Flat ("360") | A single ordered list of questions |

Reloading a session always resumes where the respondent left off.
"""

tags_metadata = [
    {
        "name": "Health",
        "description": "Health check endpoints. No authentication required.",
    },
    {
        "name": "Responses",
        "description": "Respondent sessions. Open → Advance per question → Complete. Retake reopens a completed assessment.",
    },
    {
        "name": "Nominations",
        "description": "Reviewer nominations. Nominate → Accept / Reject → Reviewer answers through a session.",
    },
]

app = FastAPI(
    title="Assessment Workflow API",
    description=DESCRIPTION,
    version="1.0.0",
    openapi_tags=tags_metadata,
)

# Configure CORS
ALLOWED_ORIGINS = settings.ALLOWED_ORIGINS.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information and documentation links"""
    return {
        "message": "Welcome to the Assessment Workflow API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "authentication": {
            "type": "API Key",
            "header": "X-API-Key",
            "note": "Required for all endpoints except /, /ping and /health"
        },
        "endpoints": {
            "health": "/health",
            "ping": "/ping",
            "responses": "/responses",
            "nominations": "/nominations"
        }
    }


# Health check endpoints (public - no authentication required)
@app.get("/ping", tags=["Health"])
def ping():
    """Simple ping endpoint to check if API is responding. No authentication required."""
    return {"message": "pong"}


@app.get("/health", tags=["Health"])
def health():
    """Health check endpoint with basic status information. No authentication required."""
    return {
        "status": "healthy",
        "service": "Assessment Workflow API",
        "version": "1.0.0"
    }


# Register routers
app.include_router(responses_router)
app.include_router(nominations_router)
