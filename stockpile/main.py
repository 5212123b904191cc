from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .errors import StockpileError, NotFound, InvalidUpdateRequest, PersistenceError
from .routes.resources import router as resources_router
from .routes.leaderboard import router as leaderboard_router

app = FastAPI(title="Stockpile",
              description="Shared resource tracking with audited quantity updates and points",
    version="0.1.0",
    docs_url="/docs",          # Swagger UI
    redoc_url="/redoc",        # ReDoc
    openapi_url="/openapi.json")

app.include_router(resources_router)
app.include_router(leaderboard_router)

def _status_for(exc: StockpileError) -> int:
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, InvalidUpdateRequest):
        return 400
    if isinstance(exc, PersistenceError):
        return 409 if exc.conflict else 503
    return 500

@app.exception_handler(StockpileError)
def stockpile_error(request: Request, exc: StockpileError):
    # storage failures carry driver details on __cause__; never echo them
    message = exc.safe_message if isinstance(exc, PersistenceError) else exc.message
    return JSONResponse(status_code=_status_for(exc), content={"error": exc.kind, "message": message})

@app.get("/health")
def health():
    return {"ok": True}
