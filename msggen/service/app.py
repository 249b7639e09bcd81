"""FastAPI application entrypoint for msggen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import ConfigError, MalformedDefinitionError, MissingDefinitionError
from ..models import GenerationReport, ResolvedDeclaration
from ..orchestrator import Orchestrator


class GenerateRequest(BaseModel):
    output_dir: str
    package_names: List[str] = Field(default_factory=list)
    package_paths: List[str] = Field(default_factory=list)
    source_paths: List[str] = Field(default_factory=list)


class FailureModel(BaseModel):
    type: str
    error: str


class GenerateResponse(BaseModel):
    attempted: List[str]
    generated: List[str]
    failures: List[FailureModel]
    empty_packages: List[str]


class ResolveRequest(BaseModel):
    type: str
    package_paths: List[str] = Field(default_factory=list)


class ResolveResponse(BaseModel):
    type: str
    text: str
    dependencies: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing msggen operations."""

    app = FastAPI(title="msggen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Indexes are rebuilt per request, so each request gets its own orchestrator.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        def _run_generate() -> GenerationReport:
            return orchestrator.generate(
                payload.output_dir,
                payload.package_names,
                payload.package_paths,
                payload.source_paths,
            )

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run_generate)
        return GenerateResponse(
            attempted=list(report.attempted),
            generated=[str(path) for path in report.generated],
            failures=[
                FailureModel(type=failure.full_name, error=failure.error)
                for failure in report.failures
            ],
            empty_packages=list(report.empty_packages),
        )

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(
        payload: ResolveRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ResolveResponse:
        def _run_resolve() -> ResolvedDeclaration:
            return orchestrator.resolve(payload.type, payload.package_paths)

        loop = asyncio.get_running_loop()
        declaration = await loop.run_in_executor(None, _run_resolve)
        return ResolveResponse(
            type=declaration.full_name,
            text=declaration.text,
            dependencies=[dependency.full_name for dependency in declaration.dependencies],
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(MissingDefinitionError)
    async def missing_definition_handler(_: Any, exc: MissingDefinitionError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(MalformedDefinitionError)
    async def malformed_definition_handler(
        _: Any, exc: MalformedDefinitionError
    ) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
