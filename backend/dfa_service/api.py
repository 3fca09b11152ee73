"""
DFA Simulator API

FastAPI-based REST API for validating and simulating DFAs and for keeping
a per-user collection of saved DFAs.

Security features:
  - Input sanitization (max length, control character stripping)
  - Rate limiting via slowapi (set RATE_LIMIT_ENABLED=false to disable)
  - Optional API key authentication (set API_KEY env var to enable)
  - Saved DFAs are scoped to the X-User-Id header
"""

import logging
import os
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import APIKeyHeader
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse, Response

from dfa_engine import schemas
from dfa_engine.config import load_settings
from dfa_engine.errors import (
    AuthenticationError,
    DFANotFoundError,
    DFAOwnershipError,
    RecordIncompleteError,
)
from dfa_engine.identity import UserIdentity, resolve_identity
from dfa_engine.schemas import DFAForm, DFASummary, SaveDFARequest, SimulationRequest
from dfa_engine.visualizer import to_dot
from main import DFASimulatorSystem

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

settings = load_settings()

# --- Rate Limiter ---
RATE_LIMIT_ENABLED = os.environ.get("RATE_LIMIT_ENABLED", "true").lower() != "false"
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

# --- API Key Auth (optional) ---
API_KEY = os.environ.get("API_KEY")  # Set to enable auth; unset = disabled
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# --- Identity headers ---
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)
user_email_header = APIKeyHeader(name="X-User-Email", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Security(api_key_header)):
    """Validate API key if API_KEY env var is set. No-op when unset."""
    if API_KEY is None:
        return
    if api_key != API_KEY:
        raise HTTPException(
            status_code=401,
            detail={
                "error": "Invalid or missing API key",
                "error_type": "AuthenticationError",
                "hint": "Provide a valid X-API-Key header."
            }
        )


async def get_current_user(
    user_id: Optional[str] = Security(user_id_header),
    email: Optional[str] = Security(user_email_header),
) -> UserIdentity:
    try:
        return resolve_identity(user_id, email)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=401,
            detail={
                "error": str(e),
                "error_type": "AuthenticationError",
                "hint": "Sign in and send your user id in the X-User-Id header."
            }
        )


# --- Lifespan Management ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the simulator system once and keep it on app.state."""
    logger.info("Initializing DFA Simulator System...")
    schemas.MAX_INPUT_LENGTH = settings.max_input_length
    try:
        app.state.system = DFASimulatorSystem(settings)
        # Touch the store so a bad DB path shows up as degraded health
        app.state.system.store
        app.state.system_error = None
        logger.info("DFA Simulator System initialized successfully!")
    except Exception as e:
        logger.error(f"Failed to initialize system: {e}")
        app.state.system = None
        app.state.system_error = str(e)

    yield

    logger.info("Shutting down DFA Simulator System...")
    app.state.system = None


app = FastAPI(
    title="DFA Simulator API",
    version=API_VERSION,
    description="Validate, simulate and store Deterministic Finite Automata",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Domain error mapping ---

def _error_response(status_code: int, error: str, error_type: str, hint: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"error": error, "error_type": error_type, "hint": hint}},
    )


@app.exception_handler(DFANotFoundError)
async def not_found_handler(request: Request, exc: DFANotFoundError):
    return _error_response(404, str(exc), "NotFound", "Check the DFA id; it may have been deleted.")


@app.exception_handler(DFAOwnershipError)
async def ownership_handler(request: Request, exc: DFAOwnershipError):
    return _error_response(403, str(exc), "PermissionDenied")


@app.exception_handler(RecordIncompleteError)
async def incomplete_handler(request: Request, exc: RecordIncompleteError):
    return _error_response(422, str(exc), "ValidationError", "Complete the form before saving.")


# --- Response Models ---

class HealthResponse(BaseModel):
    status: str
    system_initialized: bool
    message: str
    version: str = API_VERSION


# --- Helper Functions ---

def get_system(request: Request) -> DFASimulatorSystem:
    """
    Dependency function to get the system instance from app.state.
    Raises 503 if the system failed to start.
    """
    if not hasattr(request.app.state, 'system') or request.app.state.system is None:
        error_msg = getattr(request.app.state, 'system_error', 'Unknown initialization error')
        raise HTTPException(
            status_code=503,
            detail={
                "error": "System not initialized",
                "error_type": "ServiceUnavailable",
                "hint": f"Check DFA_DB_PATH and file permissions. Init error: {error_msg}"
            }
        )
    return request.app.state.system


def _summary(stored) -> DFASummary:
    return DFASummary(
        id=stored.id,
        name=stored.record.name,
        description=stored.record.description,
        states=len(stored.record.states),
        alphabet=stored.record.alphabet,
        created_at=stored.created_at,
        created_by=stored.created_by,
    )


# --- API Endpoints ---

@app.get("/health", response_model=HealthResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint to verify API is running."""
    system_initialized = (
        hasattr(request.app.state, 'system') and
        request.app.state.system is not None
    )

    return HealthResponse(
        status="healthy" if system_initialized else "degraded",
        system_initialized=system_initialized,
        message="DFA Simulator API is running" if system_initialized else "System not fully initialized"
    )


@app.post("/validate", dependencies=[Depends(verify_api_key)])
@limiter.limit("60/minute")
async def validate_dfa(request: Request, form: DFAForm):
    """Check a DFA definition and list every problem found."""
    system = get_system(request)
    result = system.validator.validate(form.to_dfa())
    return result.to_dict()


@app.post("/simulate", dependencies=[Depends(verify_api_key)])
@limiter.limit("60/minute")
async def simulate_dfa(request: Request, query: SimulationRequest):
    """
    Validate a DFA and, if it is well-formed, trace it over the input string.

    Returns:
        - 200: {valid, errors, trace, accepted}; trace is null when invalid
        - 401: Unauthorized (invalid API key)
        - 422: Malformed request body
        - 429: Too many requests
        - 503: Service unavailable
    """
    request_id = str(uuid.uuid4())[:8]
    t_start = time.time()
    logger.info(f"[API][{request_id}] Simulating input of length {len(query.input_string)}")

    system = get_system(request)
    try:
        report = system.run(query.to_dfa(), query.input_string)
    except Exception as e:
        logger.error(f"[API][{request_id}] Unexpected error: {str(e)}")
        logger.error(traceback.format_exc())
        raise HTTPException(
            status_code=500,
            detail={
                "error": f"Internal server error: {str(e)}",
                "error_type": "RuntimeError",
                "hint": "An unexpected error occurred. Check server logs for details."
            }
        )

    total_ms = round((time.time() - t_start) * 1000, 1)
    logger.info(f"[API][{request_id}] Done in {total_ms}ms: valid={report.validation.is_valid} accepted={report.accepted}")

    return {
        **report.to_dict(),
        "performance": {"total_ms": total_ms},
    }


@app.post("/export/dot", dependencies=[Depends(verify_api_key)])
@limiter.limit("30/minute")
async def export_dot(request: Request, form: DFAForm):
    """Return the DFA as a Graphviz DOT file."""
    dot_content = to_dot(form.to_dfa())
    return Response(
        content=dot_content,
        media_type="text/vnd.graphviz",
        headers={"Content-Disposition": "attachment; filename=dfa_export.dot"}
    )


# --- Saved DFAs ---

@app.post("/dfas", status_code=201, dependencies=[Depends(verify_api_key)])
@limiter.limit("30/minute")
async def save_dfa(request: Request, body: SaveDFARequest, user: UserIdentity = Depends(get_current_user)):
    system = get_system(request)
    dfa_id = system.save(user, body.to_record())
    logger.info(f"[API] Saved DFA {dfa_id[:8]} for user {user.uid}")
    return {"id": dfa_id, "message": "Your DFA has been saved successfully."}


@app.get("/dfas", dependencies=[Depends(verify_api_key)])
@limiter.limit("60/minute")
async def list_dfas(request: Request, user: UserIdentity = Depends(get_current_user)):
    """List the caller's saved DFAs, newest first."""
    system = get_system(request)
    return {"dfas": [_summary(s).model_dump() for s in system.list_saved(user)]}


@app.get("/dfas/{dfa_id}", dependencies=[Depends(verify_api_key)])
@limiter.limit("60/minute")
async def load_dfa(request: Request, dfa_id: str, user: UserIdentity = Depends(get_current_user)):
    system = get_system(request)
    return system.load(user, dfa_id).to_dict()


@app.delete("/dfas/{dfa_id}", dependencies=[Depends(verify_api_key)])
@limiter.limit("30/minute")
async def delete_dfa(request: Request, dfa_id: str, user: UserIdentity = Depends(get_current_user)):
    system = get_system(request)
    system.delete(user, dfa_id)
    return {"deleted": dfa_id}


@app.post("/dfas/{dfa_id}/run", dependencies=[Depends(verify_api_key)])
@limiter.limit("30/minute")
async def run_saved_dfa(request: Request, dfa_id: str, user: UserIdentity = Depends(get_current_user)):
    """Run every stored test string of a saved DFA."""
    system = get_system(request)
    results = system.run_saved(user, dfa_id)
    return {
        "id": dfa_id,
        "results": [{"input": s, **report.to_dict()} for s, report in results],
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "DFA Simulator API",
        "version": API_VERSION,
        "description": "Validate and simulate Deterministic Finite Automata",
        "endpoints": {
            "/health": "Health check (GET)",
            "/validate": "Validate a DFA definition (POST)",
            "/simulate": "Validate and trace an input string (POST)",
            "/export/dot": "Export DFA as Graphviz DOT file (POST)",
            "/dfas": "Save (POST) or list (GET) your DFAs",
            "/dfas/{id}": "Load (GET) or delete (DELETE) a saved DFA",
            "/dfas/{id}/run": "Run the stored test strings of a saved DFA (POST)"
        }
    }


if __name__ == "__main__":
    import uvicorn

    from dfa_engine.logging_config import setup_logging

    setup_logging(settings)

    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("API_PORT", "8000"))

    uvicorn.run(app, host=host, port=port)
