"""
Decision Tracker - pros/cons decisions with AI suggestions and web research
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from decision_tracker import crud
from decision_tracker.ai_functions import (
    generate_pros_cons,
    openai_client,
    perplexity_client,
    perplexity_web_search,
)
from decision_tracker.config import Settings
from decision_tracker.database import Base, make_engine, make_session_factory
from decision_tracker.instrumentor import (
    configure_logging,
    initiate_tracing,
    report_exception,
)
from decision_tracker.models import (
    DecisionCreate,
    DecisionItemOut,
    DecisionOut,
    DecisionUpdate,
    ItemCreate,
    ProfileCreate,
    ProfileOut,
    ProfileUpdate,
    SuggestionRequest,
    SuggestionsOut,
    WebSearchRequest,
    clean_suggestions,
)
from decision_tracker.prompts import build_research_query

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def error_response(message, status_code=500):
    return JSONResponse(content={"error": message}, status_code=status_code)


def handle_failure(name, exc):
    logger.exception("Error in %s: %s", name, exc)
    report_exception(exc)
    return error_response(str(exc))


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# Dependency to provide a database session
def get_db(request: Request):
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def _owned_decision(db, user_id, decision_id):
    decision = crud.get_decision(db, user_id, decision_id)
    if decision is None:
        raise HTTPException(status_code=404, detail="Decision not found")
    return decision


def create_app(settings: Optional[Settings] = None, engine=None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)
    initiate_tracing(settings)

    engine = engine or make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Decision Tracker")
    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = make_session_factory(engine)

    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        # Preflight is answered before routing or body parsing
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.detail, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}"
            for err in exc.errors()
        )
        return error_response(f"Invalid request: {errors}", 400)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        # Runs outside the http middleware, so CORS headers are set here
        response = handle_failure(f"{request.method} {request.url.path}", exc)
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/")
    def read_root():
        return {"status": "ok"}

    @app.post("/api/generate-pros-cons")
    async def generate_pros_cons_endpoint(request: Request):
        """Forward a decision to the LLM and return its pros and cons."""
        try:
            data = await request.json()
            client = openai_client(settings)
            body = SuggestionRequest.model_validate(data)
            result = await generate_pros_cons(
                client, body.title, body.description, model=settings.openai_model
            )
            return JSONResponse(content=result)
        except Exception as e:
            return handle_failure("generate-pros-cons", e)

    @app.post("/api/web-search")
    async def web_search_endpoint(request: Request):
        """Run a web search and return the summary with related questions."""
        try:
            data = await request.json()
            client = perplexity_client(settings)
            body = WebSearchRequest.model_validate(data)
            result = await perplexity_web_search(
                client, body.query, model=settings.pplx_model
            )
            return JSONResponse(content=result.model_dump())
        except Exception as e:
            return handle_failure("web-search", e)

    @app.post("/api/profile")
    def register_profile(
        body: ProfileCreate,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        profile = crud.ensure_profile(db, user_id, body.display_name)
        return ProfileOut.model_validate(profile).model_dump(mode="json")

    @app.get("/api/profile")
    def read_profile(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
        profile = crud.get_profile(db, user_id)
        if profile is None:
            return error_response("Profile not found", 404)
        return ProfileOut.model_validate(profile).model_dump(mode="json")

    @app.patch("/api/profile")
    def edit_profile(
        body: ProfileUpdate,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        profile = crud.update_profile(db, user_id, body.display_name)
        if profile is None:
            return error_response("Profile not found", 404)
        return ProfileOut.model_validate(profile).model_dump(mode="json")

    @app.get("/api/decisions")
    def list_decisions(
        user_id: str = Depends(get_user_id), db: Session = Depends(get_db)
    ):
        decisions = crud.list_decisions(db, user_id)
        return {
            "decisions": [DecisionOut.model_validate(d).to_json() for d in decisions]
        }

    @app.post("/api/decisions")
    def create_decision(
        body: DecisionCreate,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        decision = crud.create_decision(db, user_id, body.title, body.description)
        logger.info("Created decision %s", decision.id)
        return JSONResponse(
            content=DecisionOut.model_validate(decision).to_json(), status_code=201
        )

    @app.get("/api/decisions/{decision_id}")
    def read_decision(
        decision_id: str,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        decision = _owned_decision(db, user_id, decision_id)
        return DecisionOut.model_validate(decision).to_json()

    @app.patch("/api/decisions/{decision_id}")
    def edit_decision(
        decision_id: str,
        body: DecisionUpdate,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        changes = body.model_dump(exclude_unset=True)
        if changes.get("title", "") is None:
            return error_response("Title must not be null", 400)
        decision = crud.update_decision(db, user_id, decision_id, changes)
        if decision is None:
            return error_response("Decision not found", 404)
        return DecisionOut.model_validate(decision).to_json()

    @app.delete("/api/decisions/{decision_id}")
    def delete_decision(
        decision_id: str,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        if not crud.delete_decision(db, user_id, decision_id):
            return error_response("Decision not found", 404)
        logger.info("Deleted decision %s", decision_id)
        return Response(status_code=204)

    @app.post("/api/decisions/{decision_id}/items")
    def add_item(
        decision_id: str,
        body: ItemCreate,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        decision = _owned_decision(db, user_id, decision_id)
        item = crud.add_item(db, decision, body.content, body.type)
        return JSONResponse(
            content=DecisionItemOut.model_validate(item).model_dump(mode="json"),
            status_code=201,
        )

    @app.delete("/api/items/{item_id}")
    def remove_item(
        item_id: str,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        if not crud.delete_item(db, user_id, item_id):
            return error_response("Item not found", 404)
        return Response(status_code=204)

    @app.post("/api/decisions/{decision_id}/suggestions")
    async def add_suggestions(
        decision_id: str,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        """Generate pros and cons for a stored decision and save them all at once."""
        decision = _owned_decision(db, user_id, decision_id)
        try:
            client = openai_client(settings)
            result = await generate_pros_cons(
                client,
                decision.title,
                decision.description,
                model=settings.openai_model,
            )
            items = crud.add_items(
                db,
                decision,
                clean_suggestions(result["pros"], "pro"),
                clean_suggestions(result["cons"], "con"),
            )
        except Exception as e:
            return handle_failure("decision suggestions", e)
        logger.info("Added %d suggested items to decision %s", len(items), decision.id)
        added = SuggestionsOut(
            added=[DecisionItemOut.model_validate(item) for item in items]
        )
        return JSONResponse(content=added.model_dump(mode="json"), status_code=201)

    @app.post("/api/decisions/{decision_id}/research")
    async def research_decision(
        decision_id: str,
        user_id: str = Depends(get_user_id),
        db: Session = Depends(get_db),
    ):
        decision = _owned_decision(db, user_id, decision_id)
        query = build_research_query(decision.title)
        try:
            client = perplexity_client(settings)
            result = await perplexity_web_search(client, query, model=settings.pplx_model)
        except Exception as e:
            return handle_failure("decision research", e)
        return {"query": query, **result.model_dump()}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
