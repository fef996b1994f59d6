"""FastAPI application entrypoint for bonsaigen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Mapping, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..generator import Generator
from ..host.base import SemanticHost
from ..host.csharp import CSharpCompilation
from ..models import MARKER_ATTRIBUTE, Emitted, GenerationResult

SourcesHostFactory = Callable[[Mapping[str, str]], SemanticHost]


class GenerateRequest(BaseModel):
    sources: Dict[str, str] = Field(default_factory=dict)
    marker: str = MARKER_ATTRIBUTE
    emit_bootstrap: bool = True


class UnitModel(BaseModel):
    hint_name: str
    namespace: str
    type_name: str
    text: str


class SkippedModel(BaseModel):
    owner: str
    reason: str
    members: List[str] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    fingerprint: str
    units: List[UnitModel]
    skipped: List[SkippedModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def _default_generator() -> Generator:
    return Generator()


def create_app(
    generator_factory: Callable[[], Generator] = _default_generator,
    host_factory: SourcesHostFactory = CSharpCompilation.from_sources,
) -> FastAPI:
    """Create the FastAPI application exposing generation passes over in-memory sources."""

    app = FastAPI(title="bonsaigen", version="1.0.0")

    async def get_generator() -> Generator:
        # a fresh generator per request keeps passes independent
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        generator: Generator = Depends(get_generator),
    ) -> GenerateResponse:
        def _run() -> GenerationResult:
            host = host_factory(payload.sources)
            return generator.run(
                host, marker=payload.marker, emit_bootstrap=payload.emit_bootstrap
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return _to_response(result)

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _to_response(result: GenerationResult) -> GenerateResponse:
    units = [
        UnitModel(
            hint_name=unit.hint_name,
            namespace=unit.namespace,
            type_name=unit.type_name,
            text=unit.text,
        )
        for unit in result.units
    ]
    skipped: List[SkippedModel] = []
    for outcome in result.outcomes:
        if isinstance(outcome, Emitted):
            for member in outcome.skipped_members:
                skipped.append(
                    SkippedModel(
                        owner=outcome.owner.display_name,
                        reason=member.reason,
                        members=[member.candidate.name],
                    )
                )
        else:
            skipped.append(
                SkippedModel(
                    owner=outcome.owner.display_name,
                    reason=outcome.reason,
                    members=[candidate.name for candidate in outcome.candidates],
                )
            )
    return GenerateResponse(fingerprint=result.fingerprint, units=units, skipped=skipped)


def run_service(
    host: str = "127.0.0.1", port: int = 8000, app: Optional[FastAPI] = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(app or create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
