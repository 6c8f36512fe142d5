"""
FastAPI backend for questionnaire validation.
Provides REST API for structure, response and completion validation.
"""

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Any, Optional
import logging

from questionnaire_validation import (
    VALID_QUESTION_KINDS,
    VALID_ASSESSMENT_KINDS,
    CHOICE_KINDS,
    EXPECTED_CATEGORY_COUNTS,
    completion_table,
)
from validation_service import (
    ValidationService,
    ValidationServiceOptions,
    setup_logging,
)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# CORS middleware for React frontend
# Allow frontend ports in range 5173-5182 for dynamic port allocation
FRONTEND_ORIGINS = [
    f"http://localhost:{port}" for port in range(5173, 5183)
] + [
    f"http://127.0.0.1:{port}" for port in range(5173, 5183)
] + ["http://localhost:3000"]


# ============================================================================
# Pydantic Models
# ============================================================================

class ApiModel(BaseModel):
    """Request bodies use the camelCase keys of the questionnaire documents."""
    model_config = ConfigDict(populate_by_name=True)


class QuestionnaireRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")


class ResponsesRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")
    responses: Any = None
    entity_id: Optional[str] = Field(default=None, alias="entityId")
    real_time: bool = Field(default=False, alias="realTime")


class CategoryRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")
    category_id: str = Field(alias="categoryId")
    responses: Any = None


class CompletionRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")
    responses: Any = None
    entity_id: Optional[str] = Field(default=None, alias="entityId")


class SummaryRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")
    assessment: Any = None


class ProgressRequest(ApiModel):
    questionnaire: Any = Field(default=None, alias="schema")
    responses: Any = None


def get_service(request: Request) -> ValidationService:
    return request.app.state.validation_service


# ============================================================================
# App Factory
# ============================================================================

def create_app(service: Optional[ValidationService] = None) -> FastAPI:
    """Build the API around an explicit ValidationService instance."""
    if service is None:
        options = ValidationServiceOptions.from_env()
        setup_logging(options.log_level)
        service = ValidationService(options)
        logger.info(
            f"Validation service configured: caching={options.enable_caching}, "
            f"ttl={options.cache_ttl_seconds}s, real_time={options.enable_real_time_validation}, "
            f"throttle={options.validation_throttle_seconds}s"
        )

    app = FastAPI(
        title="Questionnaire Validation API",
        description="API for validating assessment questionnaires and responses",
        version=API_VERSION
    )
    app.state.validation_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=FRONTEND_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release waiters of any scheduled validation."""
        await app.state.validation_service.shutdown()

    # ========================================================================
    # Configuration Endpoints
    # ========================================================================

    @app.get("/api/config/kinds")
    async def get_kinds_config() -> Dict[str, Any]:
        """Question and assessment kinds the validators understand."""
        return {
            "questionKinds": VALID_QUESTION_KINDS,
            "choiceKinds": sorted(k.value for k in CHOICE_KINDS),
            "assessmentKinds": VALID_ASSESSMENT_KINDS,
            "expectedCategoryCounts": {k.value: v for k, v in EXPECTED_CATEGORY_COUNTS.items()},
        }

    # ========================================================================
    # Validation Endpoints
    # ========================================================================

    @app.post("/api/validate/questionnaire")
    async def validate_questionnaire(
        request: QuestionnaireRequest,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Validate a questionnaire schema's structure."""
        result = await service.validate_questionnaire(request.questionnaire)
        return result.to_dict()

    @app.post("/api/validate/responses")
    async def validate_responses(
        request: ResponsesRequest,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Validate responses; real-time requests for one entity are debounced."""
        result = await service.validate_responses(
            request.responses,
            request.questionnaire,
            real_time=request.real_time,
            entity_id=request.entity_id,
        )
        return result.to_dict()

    @app.post("/api/validate/category")
    async def validate_category(
        request: CategoryRequest,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Validate the answers of a single category."""
        result = await service.validate_category_responses(
            request.category_id, request.responses, request.questionnaire
        )
        return result.to_dict()

    @app.post("/api/validate/completion")
    async def validate_completion(
        request: CompletionRequest,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Check whether an assessment is ready for submission."""
        result = await service.validate_completion(
            request.responses, request.questionnaire, entity_id=request.entity_id
        )
        return result.to_dict()

    @app.post("/api/validate/summary")
    async def validate_summary(
        request: SummaryRequest,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Structure, response and completion validation in one call."""
        summary = await service.get_validation_summary(request.assessment, request.questionnaire)
        return summary.to_dict()

    @app.post("/api/progress")
    async def get_progress(request: ProgressRequest) -> Dict[str, List[Dict[str, Any]]]:
        """Per-category progress counters for display."""
        try:
            df = completion_table(request.responses, request.questionnaire)
        except Exception as e:
            logger.exception("Progress table raised an internal error")
            raise HTTPException(status_code=500, detail=f"Progress failed: {str(e)}")

        df_clean = df.astype(object).where(df.notnull(), None)
        return {"categories": df_clean.to_dict(orient="records")}

    # ========================================================================
    # Cache & Scheduling Endpoints
    # ========================================================================

    @app.delete("/api/validate/cache")
    async def clear_cache(service: ValidationService = Depends(get_service)) -> Dict[str, Any]:
        """Clear every cached validation result."""
        service.clear_cache()
        return {"success": True}

    @app.delete("/api/validate/cache/{entity_id}")
    async def clear_entity_cache(
        entity_id: str,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Clear cached results of one assessment."""
        removed = service.clear_entity_cache(entity_id)
        return {"success": True, "removed": removed}

    @app.post("/api/validate/cancel/{entity_id}")
    async def cancel_validation(
        entity_id: str,
        service: ValidationService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Stop waiting for a scheduled real-time validation."""
        return {"cancelled": service.cancel_validation(entity_id)}

    @app.get("/api/validate/stats")
    async def get_stats(service: ValidationService = Depends(get_service)) -> Dict[str, Any]:
        """Cache and scheduler statistics."""
        return service.get_validation_stats()

    # ========================================================================
    # Health Check
    # ========================================================================

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": API_VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description="Questionnaire Validation API")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the server on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (requires import string)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    parser.set_defaults(reload=False)
    args = parser.parse_args()

    if args.reload:
        # When reload is enabled, must use import string
        uvicorn.run("main:app", host=args.host, port=args.port, reload=True)
    else:
        # Without reload, can use the app object directly
        uvicorn.run(app, host=args.host, port=args.port)
